from radiptu.services.cache import LocalCacheRepository
from radiptu.services.db_repo import DbConnectionManager, PropertyRepository
from radiptu.services.property_service import PropertyService
from radiptu.services.reports import REPORT_SPECS, ReportSpec, build_report

__all__ = [
    "LocalCacheRepository",
    "DbConnectionManager",
    "PropertyRepository",
    "PropertyService",
    "REPORT_SPECS",
    "ReportSpec",
    "build_report",
]
