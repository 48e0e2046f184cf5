import pytest

from gps_simulator.core.track_loader import country_code_from_filename, load_routes, read_coordinates
from gps_simulator.models.route import Coordinate

from conftest import write_gpx


@pytest.mark.parametrize("filename, expected", [
    ("01-NL-amsterdam.gpx", "NL"),
    ("2-de.gpx", "DE"),
    ("route-IT.gpx", "IT"),
    ("nocode.gpx", None),
    ("01-1A-x.gpx", None),
    ("01-N.gpx", None),
])
def test_country_code_from_filename(filename, expected):
    assert country_code_from_filename(filename) == expected


def test_read_coordinates_from_track_route_and_waypoints(tmp_path):
    path = tmp_path / "01-NL.gpx"
    path.write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">\n'
        '  <wpt lat="52.3" lon="4.3"></wpt>\n'
        '  <rte><rtept lat="52.2" lon="4.2"></rtept></rte>\n'
        '  <trk><trkseg><trkpt lat="52.0" lon="4.0"></trkpt><trkpt lat="52.1" lon="4.1"></trkpt></trkseg></trk>\n'
        '</gpx>\n',
        encoding="utf-8",
    )

    assert read_coordinates(path) == [
        Coordinate(52.0, 4.0), Coordinate(52.1, 4.1), Coordinate(52.2, 4.2), Coordinate(52.3, 4.3),
    ]


def test_load_routes(routes_dir):
    routes = load_routes(str(routes_dir))

    assert [route.route_id for route in routes] == ["route-1", "route-2"]
    assert routes[0].country_codes() == ["NL", "BE"]
    assert list(routes[0].sub_routes[0].coordinates) == [Coordinate(52.37, 4.90), Coordinate(52.09, 5.12)]
    assert routes[1].country_codes() == ["DE"]


def test_sub_routes_are_ordered_by_file_name(tmp_path):
    route_dir = tmp_path / "routes" / "r"
    route_dir.mkdir(parents=True)
    write_gpx(route_dir / "02-DE-b.gpx", [(48.0, 11.0)])
    write_gpx(route_dir / "01-IT-a.gpx", [(46.0, 11.0)])
    write_gpx(route_dir / "03-NL-c.gpx", [(52.0, 5.0)])

    routes = load_routes(str(tmp_path / "routes"))

    assert routes[0].country_codes() == ["IT", "DE", "NL"]


def test_unusable_files_are_skipped(tmp_path):
    route_dir = tmp_path / "routes" / "r"
    route_dir.mkdir(parents=True)
    write_gpx(route_dir / "01-NL-ok.gpx", [(52.0, 5.0)])
    write_gpx(route_dir / "02-BE-empty.gpx", [])
    write_gpx(route_dir / "nocountry.gpx", [(50.0, 4.0)])
    (route_dir / "03-DE-broken.gpx").write_text("<gpx><trk>", encoding="utf-8")
    (route_dir / "notes.txt").write_text("not a track", encoding="utf-8")
    (tmp_path / "routes" / "empty-route").mkdir()

    routes = load_routes(str(tmp_path / "routes"))

    assert [route.route_id for route in routes] == ["r"]
    assert routes[0].country_codes() == ["NL"]


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_routes(str(tmp_path / "missing"))


def test_latin1_track_is_read_with_declared_encoding(tmp_path):
    route_dir = tmp_path / "routes" / "r"
    route_dir.mkdir(parents=True)
    write_gpx(route_dir / "01-NL-a.gpx", [(52.0, 5.0)])
    (route_dir / "02-DE-koeln.gpx").write_bytes(
        '<?xml version="1.0" encoding="ISO-8859-1"?>\n'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">\n'
        '  <trk><name>Köln</name><trkseg><trkpt lat="50.94" lon="6.96"></trkpt></trkseg></trk>\n'
        '</gpx>\n'.encode("iso-8859-1")
    )

    routes = load_routes(str(tmp_path / "routes"))

    assert routes[0].country_codes() == ["NL", "DE"]
    assert list(routes[0].sub_routes[1].coordinates) == [Coordinate(50.94, 6.96)]


def test_undecodable_track_is_skipped(tmp_path):
    route_dir = tmp_path / "routes" / "r"
    route_dir.mkdir(parents=True)
    write_gpx(route_dir / "01-NL-a.gpx", [(52.0, 5.0)])
    (route_dir / "02-DE-koeln.gpx").write_bytes(
        b'<gpx version="1.1"><trk><name>K\xf6ln</name><trkseg>'
        b'<trkpt lat="50.94" lon="6.96"></trkpt></trkseg></trk></gpx>\n'
    )

    routes = load_routes(str(tmp_path / "routes"))

    assert routes[0].country_codes() == ["NL"]
