"""
Shared fixtures: small road datasets around Santo Domingo.
"""

import pytest


@pytest.fixture
def three_segments() -> list[dict]:
    """Two parallel east-west roads ~1.1 km apart and a short north-south connector."""
    return [
        {
            "id": "A",
            "coords": [[-69.80, 18.50], [-69.79, 18.50]],
            "street_code": "001001",
            "street_name": "Calle A",
            "municipality": "DNX",
            "fclass": "primary",
            "length": 1055.8,
        },
        {
            "id": "B",
            "coords": [[-69.80, 18.51], [-69.79, 18.51]],
            "street_code": "001002",
            "street_name": "Calle B",
            "municipality": "DNX",
            "fclass": "secondary",
            "length": 1055.8,
        },
        {
            "id": "C",
            "coords": [[-69.795, 18.505], [-69.795, 18.506]],
            "street_code": "002001",
            "name": "Conector",
            "municipality": "SDO",
            "fclass": "residential",
            "length": 111.2,
        },
    ]


@pytest.fixture
def spread_segments() -> list[dict]:
    """Segments far enough apart that grid cells never overlap between them."""
    return [
        {"id": "w", "coords": [[-69.90, 18.40], [-69.89, 18.40]]},
        {"id": "e", "coords": [[-69.70, 18.60], [-69.69, 18.60]]},
        {"id": "long", "coords": [[-69.90, 18.50], [-69.80, 18.50], [-69.70, 18.50]]},
    ]
