from evoengine.utils.logger_setup import run_name, setup_logger
from evoengine.utils.timing import Stopwatch, format_duration

__all__ = ["run_name", "setup_logger", "Stopwatch", "format_duration"]
