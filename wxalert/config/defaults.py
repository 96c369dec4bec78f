"""Default monitored locations: the 25 Sri Lankan districts (representative centres)."""

from wxalert.config.schema import LocationConfig

_DISTRICTS: list[tuple[str, float, float]] = [
    ("Ampara", 7.3018, 81.6747),
    ("Anuradhapura", 8.3114, 80.4037),
    ("Badulla", 6.9934, 81.0550),
    ("Batticaloa", 7.7300, 81.6924),
    ("Colombo", 6.9271, 79.8612),
    ("Galle", 6.0535, 80.2210),
    ("Gampaha", 7.0897, 79.9994),
    ("Hambantota", 6.1246, 81.1185),
    ("Jaffna", 9.6615, 80.0255),
    ("Kalutara", 6.5854, 79.9607),
    ("Kandy", 7.2906, 80.6337),
    ("Kegalle", 7.2513, 80.3464),
    ("Kilinochchi", 9.3803, 80.3773),
    ("Kurunegala", 7.4863, 80.3623),
    ("Mannar", 8.9778, 79.9044),
    ("Matale", 7.4675, 80.6234),
    ("Matara", 5.9549, 80.5550),
    ("Monaragala", 6.8721, 81.3509),
    ("Mullaitivu", 9.2671, 80.8128),
    ("Nuwara Eliya", 6.9497, 80.7891),
    ("Polonnaruwa", 7.9403, 81.0188),
    ("Puttalam", 8.0408, 79.8391),
    ("Ratnapura", 6.7056, 80.3847),
    ("Trincomalee", 8.5874, 81.2152),
    ("Vavuniya", 8.7542, 80.4989),
]


def _slug(name: str) -> str:
    return name.lower().replace(" ", "-")


DEFAULT_LOCATIONS: list[LocationConfig] = [
    LocationConfig(name=name, slug=_slug(name), latitude=lat, longitude=lon)
    for name, lat, lon in _DISTRICTS
]
