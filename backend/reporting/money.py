# reporting/money.py
"""
Display formatting for integer minor units.

The engine works in minor units only. Serializers and management command
output render them as decimal strings with this helper.
"""


DEFAULT_DECIMAL_PLACES = 2


def format_minor_units(value: int, decimal_places: int = DEFAULT_DECIMAL_PLACES) -> str:
    """Format 123456 as "1234.56" and -5 as "-0.05"."""
    sign = "-" if value < 0 else ""
    value = abs(int(value))
    if decimal_places == 0:
        return f"{sign}{value}"
    unit = 10 ** decimal_places
    whole, fraction = divmod(value, unit)
    return f"{sign}{whole}.{fraction:0{decimal_places}d}"
