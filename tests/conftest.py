"""
Shared course builders for the layout tests.
"""

import xml.etree.ElementTree as ET

import pytest

from course_model import Basket, Course, Dropzone, Fairway, FlightLine, Hole, Mandatory, OBZone, Tee

SVG_NS = "{http://www.w3.org/2000/svg}"


def parse_svg(svg: str):
    """Parse an SVG document string into its root element."""
    return ET.fromstring(svg)


def elements_with_class(root, class_name: str):
    """Elements whose class attribute contains class_name as a word."""
    return [el for el in root.iter() if class_name in (el.get("class") or "").split()]


def all_text(root):
    """Text content of every <text> element, in document order."""
    return [el.text or "" for el in root.iter(f"{SVG_NS}text")]


def make_hole(number=1, tee=(0.0, 0.0), basket=(0.0, 0.001), with_flight_line=False, **extra):
    hole_id = f"h{number}"
    features = [
        Tee(id=f"tee{number}", coordinates=list(tee), hole_id=hole_id, name="Pro"),
        Basket(id=f"basket{number}", coordinates=list(basket), hole_id=hole_id),
    ]
    if with_flight_line:
        features.append(FlightLine(id=f"fl{number}", coordinates=[list(tee), list(basket)], hole_id=hole_id,
                                   start_feature_id=f"tee{number}"))
    return Hole(id=hole_id, number=number, features=features, **extra)


@pytest.fixture
def simple_course():
    """One hole: a tee at (0, 0) and a basket about 111 m north."""
    return Course(id="c1", name="Test Park", holes=[make_hole()])


@pytest.fixture
def flight_line_course():
    """One hole with a flight line from the tee to the basket."""
    return Course(id="c1", name="Test Park", holes=[make_hole(with_flight_line=True)])


@pytest.fixture
def busy_hole():
    """Hole carrying every game feature kind."""
    hole = make_hole(number=3, with_flight_line=True, par=4, name="Long Drive", notes="Watch the creek")
    hole.features.extend([
        Dropzone(id="dz", coordinates=[0.0002, 0.0006], hole_id="h3"),
        Mandatory(id="mando", coordinates=[-0.0002, 0.0004], hole_id="h3", rotation=90),
        Fairway(id="fw", coordinates=[[[-0.0003, 0.0], [0.0003, 0.0], [0.0003, 0.001], [-0.0003, 0.001],
                                       [-0.0003, 0.0]]], hole_id="h3"),
        OBZone(id="ob", coordinates=[[[0.0005, 0.0], [0.0008, 0.0], [0.0008, 0.001], [0.0005, 0.0]]],
               hole_id="h3"),
    ])
    return hole


@pytest.fixture
def empty_course():
    return Course(id="empty", name="Nothing Here")
