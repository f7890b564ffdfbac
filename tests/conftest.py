import pytest

from country.graph_loader import parse_country

# A(1) - B(2) - C(3) - D(8) - A, no A-C link
DIAMOND = """\
A : 1 : B-D
B : 2 : A-C
C : 3 : B-D
D : 8 : A-C
"""

LINE = """\
A : 1 : B
B : 2 : A-C
C : 2 : B-D
D : 1 : C
"""

DISCONNECTED = """\
A : 1 : B
B : 1 : A
C : 1 :
"""


@pytest.fixture
def diamond():
    return parse_country(DIAMOND)


@pytest.fixture
def line():
    return parse_country(LINE)


@pytest.fixture
def disconnected():
    return parse_country(DISCONNECTED)
