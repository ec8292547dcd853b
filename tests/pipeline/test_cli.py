# SPDX-License-Identifier: MIT
"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from layoffs.database import count_rows, read_records
from layoffs.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def loaded(runner, db_engine, sample_csv):
    """Database with the sample CSV loaded and staged."""
    assert runner.invoke(cli, ["load", str(sample_csv)]).exit_code == 0
    assert runner.invoke(cli, ["stage"]).exit_code == 0
    return db_engine


class TestLoadAndStage:

    def test_load(self, runner, db_engine, sample_csv):
        result = runner.invoke(cli, ["load", str(sample_csv)])
        assert result.exit_code == 0
        assert "Loaded 11 rows" in result.stdout
        assert count_rows("layoffs", bind=db_engine) == 11

    def test_load_twice_needs_replace(self, runner, db_engine, sample_csv):
        runner.invoke(cli, ["load", str(sample_csv)])
        assert runner.invoke(cli, ["load", str(sample_csv)]).exit_code == 1
        assert runner.invoke(cli, ["load", str(sample_csv), "--replace"]).exit_code == 0

    def test_stage_without_source(self, runner, db_engine):
        result = runner.invoke(cli, ["stage"])
        assert result.exit_code == 1

    def test_stage_copies(self, runner, loaded):
        assert count_rows("layoffs_staging", bind=loaded) == 11

    def test_duplicates_preview(self, runner, loaded):
        result = runner.invoke(cli, ["duplicates"])
        assert result.exit_code == 0
        assert "1 duplicate rows found" in result.stdout


class TestClean:

    def test_clean_writes_table(self, runner, loaded):
        result = runner.invoke(cli, ["clean"])
        assert result.exit_code == 0
        records = read_records("layoffs_staging2", bind=loaded)
        assert len(records) == 9
        assert all(r.industry != "" for r in records)

    def test_clean_export(self, runner, loaded, tmp_path, monkeypatch):
        from layoffs.config import settings
        monkeypatch.setattr(settings.pipeline, "data_processed_dir", tmp_path)
        result = runner.invoke(cli, ["clean", "--export"])
        assert result.exit_code == 0
        assert (tmp_path / "layoffs_clean.csv").exists()
        assert (tmp_path / "layoffs_clean.json").exists()

    def test_clean_without_staging(self, runner, db_engine):
        assert runner.invoke(cli, ["clean"]).exit_code == 1


class TestReport:

    def test_report_json(self, runner, loaded):
        runner.invoke(cli, ["clean"])
        result = runner.invoke(cli, ["report", "rolling", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        rolling = [row["rolling_total"] for row in data["rolling"]]
        assert rolling == sorted(rolling)

    def test_report_all_tables(self, runner, loaded):
        runner.invoke(cli, ["clean"])
        result = runner.invoke(cli, ["report", "all", "--limit", "3"])
        assert result.exit_code == 0

    def test_zero_limit_shows_no_rows(self, runner, loaded):
        runner.invoke(cli, ["clean"])
        result = runner.invoke(cli, ["report", "by_country", "--json", "--limit", "0"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"by_country": []}

    def test_top_companies_json(self, runner, loaded):
        runner.invoke(cli, ["clean"])
        result = runner.invoke(cli, ["report", "top_companies", "--json", "--top-n", "1"])
        data = json.loads(result.stdout)
        assert {row["rank"] for row in data["top_companies"]} == {1}

    def test_report_before_clean(self, runner, db_engine):
        assert runner.invoke(cli, ["report", "maxima"]).exit_code == 1

    def test_unknown_report(self, runner, db_engine):
        assert runner.invoke(cli, ["report", "nope"]).exit_code == 2


class TestStatus:

    def test_status(self, runner, loaded):
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "layoffs_staging" in result.stdout
