from records.convert import KeyPolicy, dumps_record, from_record, loads_record, to_record
from records.errors import RecordError, RecordFormatError, RecordKeyError

__all__ = [
    "KeyPolicy",
    "RecordError",
    "RecordFormatError",
    "RecordKeyError",
    "dumps_record",
    "from_record",
    "loads_record",
    "to_record",
]
