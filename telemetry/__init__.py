from .logger import TelemetryLogger, read_records, snapshot_record

__all__ = ["TelemetryLogger", "read_records", "snapshot_record"]
