from utils.errors import ValidationError


def parse_color(value):
    """Parse an ``R,G,B,A`` string into a tuple of four 0-255 integers."""
    parts = [part.strip() for part in value.split(',')]
    if len(parts) != 4:
        raise ValidationError(f"Color must be in 'R,G,B,A' format, got '{value}'")

    color = []
    for part in parts:
        try:
            channel = int(part)
        except ValueError:
            raise ValidationError(f"Cannot parse '{part}' as a number between 0 and 255") from None
        if not 0 <= channel <= 255:
            raise ValidationError(f"Cannot parse '{part}' as a number between 0 and 255")
        color.append(channel)
    return tuple(color)
