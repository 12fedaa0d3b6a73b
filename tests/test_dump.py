"""Tests for routecov.coverage.dump."""

import xml.etree.ElementTree as ET

import pytest

from routecov.coverage.dump import (
    CoverageEntry,
    StructuralMismatchError,
    find_dump_route_ids,
    iter_route_steps,
    merge_route_steps,
    parse_dump_coverage,
)

CHOICE_DUMP = """<routeCoverage>
  <route id="r" exchangesTotal="3">
    <from uri="direct:r"/>
    <to uri="mock:a" exchangesTotal="3"/>
    <choice exchangesTotal="3">
      <when exchangesTotal="2">
        <simple>${header.x}</simple>
        <to uri="mock:b" exchangesTotal="2"/>
      </when>
      <otherwise exchangesTotal="0">
        <to uri="mock:c" exchangesTotal="0"/>
      </otherwise>
    </choice>
  </route>
</routeCoverage>
"""


class TestIterRouteSteps:
    """Tests for the depth-first dump walk."""

    def test_walk_prunes_unknown_elements(self, catalog):
        route = ET.fromstring(CHOICE_DUMP).find("route")

        steps = list(iter_route_steps(route, catalog))

        assert steps == [
            ("to", 3),
            ("choice", 3),
            ("when", 2),
            ("to", 2),
            ("otherwise", 0),
            ("to", 0),
        ]

    def test_unknown_element_prunes_subtree(self, catalog):
        route = ET.fromstring(
            '<route id="r"><custom><to exchangesTotal="5"/></custom>'
            '<log exchangesTotal="1"/></route>'
        )

        assert list(iter_route_steps(route, catalog)) == [("log", 1)]

    def test_missing_or_invalid_count_is_zero(self, catalog):
        route = ET.fromstring(
            '<route id="r"><to/><log exchangesTotal="many"/><setBody exchangesTotal=" 4 "/></route>'
        )

        assert list(iter_route_steps(route, catalog)) == [("to", 0), ("log", 0), ("setBody", 4)]

    def test_namespaced_elements(self, catalog):
        route = ET.fromstring(
            '<route xmlns="http://camel.apache.org/schema/spring" id="r">'
            '<to exchangesTotal="2"/></route>'
        )

        assert list(iter_route_steps(route, catalog)) == [("to", 2)]


class TestMergeRouteSteps:
    """Tests for folding one route element into an accumulation."""

    def test_first_merge_appends(self):
        entries = []

        merge_route_steps(entries, [("to", 1), ("log", 0)], "r")

        assert entries == [CoverageEntry("to", 1), CoverageEntry("log", 0)]

    def test_matching_positions_are_summed(self):
        entries = [CoverageEntry("to", 1), CoverageEntry("log", 2)]

        merge_route_steps(entries, [("to", 3), ("log", 4), ("bean", 5)], "r")

        assert [(e.name, e.count) for e in entries] == [("to", 4), ("log", 6), ("bean", 5)]

    def test_shorter_sequence_leaves_tail(self):
        entries = [CoverageEntry("to", 1), CoverageEntry("log", 2)]

        merge_route_steps(entries, [("to", 3)], "r")

        assert [e.count for e in entries] == [4, 2]

    def test_mismatch_raises_and_leaves_entries(self):
        entries = [CoverageEntry("to", 1), CoverageEntry("log", 2)]

        with pytest.raises(StructuralMismatchError) as exc_info:
            merge_route_steps(entries, [("to", 5), ("bean", 5)], "r", source="dump.xml")

        assert entries == [CoverageEntry("to", 1), CoverageEntry("log", 2)]
        err = exc_info.value
        assert (err.route_id, err.position, err.expected, err.actual) == ("r", 1, "log", "bean")
        assert "dump.xml" in str(err)

    def test_mismatch_is_a_value_error(self):
        with pytest.raises(ValueError):
            merge_route_steps([CoverageEntry("to", 0)], [("log", 0)], "r")


class TestParseDumpCoverage:
    """Tests for aggregating a dump directory."""

    def test_single_document(self, write_dump, tmp_path):
        write_dump("A.xml", CHOICE_DUMP)

        coverage = parse_dump_coverage(tmp_path / "dumps", "r")

        assert coverage.counts == [3, 3, 2, 2, 0, 0]
        assert coverage.reliable
        assert len(coverage.sources) == 1

    def test_same_document_twice_doubles(self, write_dump, tmp_path):
        write_dump("A.xml", CHOICE_DUMP)
        write_dump("B.xml", CHOICE_DUMP)

        coverage = parse_dump_coverage(tmp_path / "dumps", "r")

        assert coverage.counts == [6, 6, 4, 4, 0, 0]

    def test_documents_with_disjoint_routes(self, write_dump, tmp_path):
        write_dump("A.xml", '<c><route id="r"><to exchangesTotal="2"/></route></c>')
        write_dump("B.xml", '<c><route id="other"><to exchangesTotal="9"/></route></c>')
        write_dump("C.xml", '<c><route id="r"><to exchangesTotal="1"/></route></c>')

        assert parse_dump_coverage(tmp_path / "dumps", "r").counts == [3]
        assert parse_dump_coverage(tmp_path / "dumps", "other").counts == [9]

    def test_repeated_route_in_one_document(self, write_dump, tmp_path):
        write_dump(
            "A.xml",
            '<c><route id="r"><to exchangesTotal="2"/></route>'
            '<route id="r"><to exchangesTotal="3"/><log exchangesTotal="1"/></route></c>',
        )

        assert parse_dump_coverage(tmp_path / "dumps", "r").counts == [5, 1]

    def test_mismatch_is_recorded(self, write_dump, tmp_path):
        write_dump("A.xml", '<c><route id="r"><to exchangesTotal="2"/></route></c>')
        write_dump("B.xml", '<c><route id="r"><log exchangesTotal="7"/></route></c>')

        coverage = parse_dump_coverage(tmp_path / "dumps", "r")

        assert coverage.counts == [2]
        assert not coverage.reliable
        assert len(coverage.mismatches) == 1
        assert coverage.mismatches[0].source.endswith("B.xml")

    def test_mismatch_does_not_skip_rest_of_document(self, write_dump, tmp_path):
        write_dump(
            "A.xml",
            '<c><route id="r"><to exchangesTotal="2"/></route>'
            '<route id="r"><log exchangesTotal="7"/></route>'
            '<route id="r"><bean exchangesTotal="1"/></route>'
            '<route id="r"><to exchangesTotal="3"/></route></c>',
        )

        coverage = parse_dump_coverage(tmp_path / "dumps", "r")

        assert coverage.counts == [5]
        assert [m.actual for m in coverage.mismatches] == ["log", "bean"]
        assert not coverage.reliable

    def test_unreadable_document_is_recorded(self, write_dump, tmp_path):
        write_dump("A.xml", "<c><route id='r'>")
        write_dump("B.xml", '<c><route id="r"><to exchangesTotal="1"/></route></c>')

        coverage = parse_dump_coverage(tmp_path / "dumps", "r")

        assert coverage.counts == [1]
        assert len(coverage.errors) == 1
        assert "A.xml" in coverage.errors[0]
        assert coverage.reliable

    def test_non_xml_files_ignored(self, write_dump, tmp_path):
        write_dump("notes.txt", "not a dump")
        write_dump("A.xml", '<c><route id="r"><to exchangesTotal="1"/></route></c>')

        coverage = parse_dump_coverage(tmp_path / "dumps", "r")

        assert coverage.counts == [1]
        assert coverage.errors == []

    def test_missing_directory(self, tmp_path):
        coverage = parse_dump_coverage(tmp_path / "nowhere", "r")

        assert coverage.entries == []
        assert coverage.reliable

    def test_unknown_route_id(self, write_dump, tmp_path):
        write_dump("A.xml", CHOICE_DUMP)

        coverage = parse_dump_coverage(tmp_path / "dumps", "missing")

        assert coverage.entries == []
        assert coverage.sources == []

    def test_to_dict(self, write_dump, tmp_path):
        write_dump("A.xml", '<c><route id="r"><to exchangesTotal="1"/></route></c>')

        data = parse_dump_coverage(tmp_path / "dumps", "r").to_dict()

        assert data["route_id"] == "r"
        assert data["entries"] == [{"name": "to", "count": 1}]
        assert data["reliable"] is True


class TestFindDumpRouteIds:
    def test_first_seen_order(self, write_dump, tmp_path):
        write_dump("A.xml", '<c><route id="b"/><route id="a"/></c>')
        write_dump("B.xml", '<c><route id="a"/><route id="c"/><route/></c>')
        write_dump("C.xml", "<broken")

        assert find_dump_route_ids(tmp_path / "dumps") == ["b", "a", "c"]
