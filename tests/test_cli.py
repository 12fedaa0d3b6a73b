"""Tests for the routecov command line."""

import json

from routecov.cli import create_parser, main


class TestParser:
    def test_coverage_options(self):
        args = create_parser().parse_args(
            ["coverage", "--fail-on-error", "--includes", "*.py", "--no-nested", "-j"]
        )

        assert args.command == "coverage"
        assert args.fail_on_error
        assert args.includes == "*.py"
        assert args.no_nested
        assert args.json

    def test_tree_defaults(self):
        args = create_parser().parse_args(["tree", "a.py"])

        assert args.files == ["a.py"]
        assert args.indent == 2
        assert not args.json

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "routecov" in capsys.readouterr().out

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert capsys.readouterr().out.startswith("routecov ")


class TestCoverageCommand:
    """Tests for ``routecov coverage``."""

    def test_text_report(self, sample_project, capsys):
        code = main(["coverage", "--base-dir", str(sample_project)])
        out, err = capsys.readouterr()

        assert code == 0
        assert "Discovered 3 routes in 2 files" in out
        assert "Route orders discovered in file src/order_routes.py" in out
        assert "Route billing discovered in file resources/billing.xml" in out
        assert "4/6 steps covered" in out
        assert "Not covered: otherwise#5, to#6" in out
        assert "1/2 routes fully covered" in out
        assert "Discovered 1 anonymous routes" in err

    def test_fail_on_error(self, sample_project, capsys):
        code = main(["coverage", "--base-dir", str(sample_project), "--fail-on-error"])
        err = capsys.readouterr().err

        assert code == 1
        assert "Some routes are not fully covered (1 of 2)" in err

    def test_fail_on_error_passes_when_covered(self, sample_project, capsys):
        code = main(
            [
                "coverage",
                "--base-dir",
                str(sample_project),
                "--fail-on-error",
                "--includes",
                "*.xml",
            ]
        )

        assert code == 0
        assert "1/1 routes fully covered" in capsys.readouterr().out

    def test_fail_on_error_from_config(self, sample_project, capsys):
        (sample_project / ".routecov.toml").write_text(
            "[coverage]\nfail_on_error = true\n", encoding="utf-8"
        )

        assert main(["coverage", "--base-dir", str(sample_project)]) == 1

    def test_string_boolean_in_config_is_rejected(self, sample_project, capsys):
        (sample_project / ".routecov.toml").write_text(
            '[coverage]\nfail_on_error = "false"\n', encoding="utf-8"
        )

        code = main(["coverage", "--base-dir", str(sample_project)])
        out, err = capsys.readouterr()

        assert code == 1
        assert "Error loading config: coverage.fail_on_error must be a boolean" in err
        assert "Some routes are not fully covered" not in err
        assert out == ""

    def test_dump_routes_without_definition_warn(self, sample_project, capsys):
        code = main(["coverage", "--base-dir", str(sample_project), "--excludes", "*.xml"])
        err = capsys.readouterr().err

        assert code == 0
        assert "Dumps contain route billing but no route with that id was discovered" in err
        assert "route orders" not in err

    def test_dump_routes_without_definition_in_json(self, sample_project, capsys):
        main(["coverage", "--base-dir", str(sample_project), "--excludes", "*.xml", "-j"])
        data = json.loads(capsys.readouterr().out)

        assert data["unmatched_dump_routes"] == ["billing"]

    def test_shared_route_id_warns_once_per_mismatch(self, sample_project, capsys):
        (sample_project / "src" / "twin_routes.py").write_text(
            "class TwinRoutes:\n"
            "    def configure(self):\n"
            "        self.from_('direct:t1').route_id('twin').to('mock:a')\n"
            "        self.from_('direct:t2').route_id('twin').to('mock:b')\n",
            encoding="utf-8",
        )
        dump_dir = sample_project / "target" / "route-coverage"
        (dump_dir / "TwinA.xml").write_text(
            '<c><route id="twin"><to exchangesTotal="1"/></route></c>', encoding="utf-8"
        )
        (dump_dir / "TwinB.xml").write_text(
            '<c><route id="twin"><log exchangesTotal="1"/></route></c>', encoding="utf-8"
        )

        main(["coverage", "--base-dir", str(sample_project)])
        err = capsys.readouterr().err

        assert err.count("Route twin: step 0 is 'log'") == 1

    def test_json_report(self, sample_project, capsys):
        code = main(["coverage", "--base-dir", str(sample_project), "--json"])
        data = json.loads(capsys.readouterr().out)

        assert code == 0
        assert data["routes_discovered"] == 3
        assert data["anonymous_routes"] == 1
        orders = data["routes"][0]
        assert orders["route_id"] == "orders"
        assert [n["count"] for n in orders["nodes"]] == [3, 2, 2, 2, 0, 0]
        assert orders["dump"]["reliable"] is True

    def test_missing_dumps_warns(self, sample_project, capsys):
        code = main(
            ["coverage", "--base-dir", str(sample_project), "--dump-dir", "target/none"]
        )
        out, err = capsys.readouterr()

        assert code == 0
        assert "No route coverage dumps found" in err
        assert "0/2 routes fully covered" in out

    def test_parse_warnings_do_not_fail(self, sample_project, capsys):
        (sample_project / "src" / "broken.py").write_text("def (:\n", encoding="utf-8")

        code = main(["coverage", "--base-dir", str(sample_project)])
        err = capsys.readouterr().err

        assert code == 0
        assert "Error parsing source file" in err


class TestTreeCommand:
    """Tests for ``routecov tree``."""

    def test_python_file(self, fixtures_dir, capsys):
        code = main(["tree", str(fixtures_dir / "routes" / "order_routes.py")])
        out = capsys.readouterr().out

        assert code == 0
        assert "Route orders discovered in file" in out
        assert "2\t  choice" in out

    def test_xml_file_json(self, fixtures_dir, capsys):
        code = main(["tree", "--json", str(fixtures_dir / "routes" / "billing.xml")])
        data = json.loads(capsys.readouterr().out)

        assert code == 0
        assert [r.get("route_id") for r in data] == ["billing", None]

    def test_unreadable_file(self, tmp_path, capsys):
        missing = tmp_path / "missing.py"

        assert main(["tree", str(missing)]) == 1
        assert "Error parsing file" in capsys.readouterr().err
