import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from zodiacsky.models import ConstellationRecord, Star  # noqa: E402


@pytest.fixture
def stars() -> tuple[Star, ...]:
    return (
        Star(ra=10.0, dec=5.0, magnitude=1.2, color_index=-0.1),
        Star(ra=20.0, dec=-8.0, magnitude=4.5, color_index=0.8),
        Star(ra=350.0, dec=12.0, magnitude=-0.5, color_index=1.7),
        Star(ra=190.0, dec=0.0, magnitude=2.0, color_index=0.3),
    )


@pytest.fixture
def constellations() -> tuple[ConstellationRecord, ...]:
    return (
        ConstellationRecord(
            id="Leo", lines=(((5.0, 2.0), (15.0, 6.0), (25.0, 4.0)),)
        ),
        ConstellationRecord(
            id="Vir", lines=(((340.0, -3.0), (350.0, -6.0)),)
        ),
    )


@pytest.fixture
def axes():
    fig = plt.figure(figsize=(4, 3), dpi=100)
    ax = fig.add_axes((0, 0, 1, 1))
    yield ax
    plt.close(fig)
