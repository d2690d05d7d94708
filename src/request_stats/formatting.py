"""
Human-readable duration and timestamp strings for stats snapshots.
"""
from datetime import datetime

_NANOS_PER_SECOND = 1_000_000_000

# (upper bound in ns, divisor in ns, unit) for sub-second durations
_SMALL_UNITS = (
  (1_000, 1, "ns"),
  (1_000_000, 1_000, "µs"),
  (_NANOS_PER_SECOND, 1_000_000, "ms"),
)


def _trim_fraction(value: int, divisor: int) -> str:
  """Render value/divisor with trailing fractional zeros removed."""
  whole, remainder = divmod(value, divisor)
  if not remainder:
    return str(whole)
  digits = len(str(divisor)) - 1
  fraction = str(remainder).rjust(digits, "0").rstrip("0")
  return f"{whole}.{fraction}"


def format_duration(seconds: float) -> str:
  """
  Format a duration in seconds the way Go's time.Duration prints.

  Examples: "0s", "850ns", "1.5µs", "12.345ms", "2.5s", "1h2m3.5s".
  """
  nanos = int(round(seconds * _NANOS_PER_SECOND))
  if nanos == 0:
    return "0s"

  sign = "-" if nanos < 0 else ""
  nanos = abs(nanos)

  if nanos < _NANOS_PER_SECOND:
    for bound, divisor, unit in _SMALL_UNITS:
      if nanos < bound:
        return f"{sign}{_trim_fraction(nanos, divisor)}{unit}"

  total_seconds, frac_nanos = divmod(nanos, _NANOS_PER_SECOND)
  hours, rest = divmod(total_seconds, 3600)
  minutes, secs = divmod(rest, 60)

  out = sign
  if hours:
    out += f"{hours}h"
  if hours or minutes:
    out += f"{minutes}m"
  out += _trim_fraction(secs * _NANOS_PER_SECOND + frac_nanos,
                        _NANOS_PER_SECOND) + "s"
  return out


def format_time(moment: datetime) -> str:
  """Format an aware datetime as "2006-01-02 15:04:05.000000 -0700 MST"."""
  return moment.strftime("%Y-%m-%d %H:%M:%S.%f %z %Z").rstrip()
