"""Utils package exports"""

from doc_search.utils.logger import setup_logger
from doc_search.utils.file_handler import (
    read_text,
    split_lines,
    read_lines,
    count_lines,
    read_head,
    iter_jsonl,
    parse_json_line,
    write_temp_file,
    fsync_directory,
    resolve_relative,
    list_files,
)

__all__ = [
    "setup_logger",
    "read_text",
    "split_lines",
    "read_lines",
    "count_lines",
    "read_head",
    "iter_jsonl",
    "parse_json_line",
    "write_temp_file",
    "fsync_directory",
    "resolve_relative",
    "list_files",
]
