from signal_audit.data.series_file import load_series_file, parse_timestamp

__all__ = ["load_series_file", "parse_timestamp"]
