from radiptu.parsers.csv_import import CsvImportResult, import_sequentials
from radiptu.parsers.property_parser import parse_properties, parse_property, to_json_dict

__all__ = ["CsvImportResult", "import_sequentials", "parse_properties", "parse_property", "to_json_dict"]
