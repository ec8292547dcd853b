# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for World Layoffs tests."""

import os
import tempfile
from datetime import date

import pytest

# Set test environment variables before importing the package
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="layoffs-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_DATA_DIR}/layoffs.db")
os.environ.setdefault("LAYOFFS_DATA_RAW_DIR", f"{_TEST_DATA_DIR}/raw")
os.environ.setdefault("LAYOFFS_DATA_PROCESSED_DIR", f"{_TEST_DATA_DIR}/processed")

from layoffs.records import LayoffRecord  # noqa: E402


CSV_HEADER = "company,location,industry,total_laid_off,percentage_laid_off,date,stage,country,funds_raised_millions"

SAMPLE_CSV_ROWS = [
    "Casper,New York City,Retail,78,0.21,9/14/2021,Post-IPO,United States,339",
    "Casper,New York City,Retail,78,0.21,9/14/2021,Post-IPO,United States,339",
    " Included Health,SF Bay Area,Healthcare,NULL,0.06,7/25/2022,Series E,United States,272",
    "Airbnb,SF Bay Area,,30,NULL,3/3/2023,Post-IPO,United States,6400",
    "Airbnb,SF Bay Area,Travel,1900,0.25,5/5/2020,Private Equity,United States,5400",
    "Coinbase,SF Bay Area,Crypto Currency,950,0.2,1/12/2023,Post-IPO,United States.,549",
    "Katerra,SF Bay Area,Construction,2434,1,6/1/2021,Unknown,United States,1600",
    "Blackbaud,Charleston,Other,NULL,NULL,3/14/2022,Post-IPO,United States,NULL",
    "Bally's Interactive,Providence,NULL,NULL,0.15,1/18/2023,Post-IPO,United States,946",
    "Google,SF Bay Area,Consumer,12000,0.06,1/20/2023,Post-IPO,United States,26",
    "Meta,SF Bay Area,Consumer,11000,0.13,11/9/2022,Post-IPO,United States,26000",
]


def make_record(company: str = "Acme", **fields) -> LayoffRecord:
    """Build a record with sensible defaults for the fields not given."""
    defaults = {
        "location": "SF Bay Area",
        "industry": "Retail",
        "total_laid_off": 100,
        "percentage_laid_off": "0.1",
        "event_date": "1/1/2022",
        "stage": "Seed",
        "country": "United States",
        "funds_raised_millions": 5,
    }
    defaults.update(fields)
    return LayoffRecord(company=company, **defaults)


@pytest.fixture
def record_factory():
    """Factory for LayoffRecord objects."""
    return make_record


@pytest.fixture
def raw_records() -> tuple:
    """Raw records as they come out of the source table (text dates)."""
    return (
        make_record("Casper", location="New York City", total_laid_off=78, percentage_laid_off="0.21",
                    event_date="9/14/2021", stage="Post-IPO", funds_raised_millions=339),
        make_record("Casper", location="New York City", total_laid_off=78, percentage_laid_off="0.21",
                    event_date="9/14/2021", stage="Post-IPO", funds_raised_millions=339),
        make_record(" Included Health", industry="Healthcare", total_laid_off=None, percentage_laid_off="0.06",
                    event_date="7/25/2022", stage="Series E", funds_raised_millions=272),
        make_record("Airbnb", industry="", total_laid_off=30, percentage_laid_off=None,
                    event_date="3/3/2023", stage="Post-IPO", funds_raised_millions=6400),
        make_record("Airbnb", industry="Travel", total_laid_off=1900, percentage_laid_off="0.25",
                    event_date="5/5/2020", stage="Private Equity", funds_raised_millions=5400),
        make_record("Coinbase", industry="Crypto Currency", total_laid_off=950, percentage_laid_off="0.2",
                    event_date="1/12/2023", stage="Post-IPO", country="United States.", funds_raised_millions=549),
        make_record("Katerra", industry="Construction", total_laid_off=2434, percentage_laid_off="1",
                    event_date="6/1/2021", stage="Unknown", funds_raised_millions=1600),
        make_record("Blackbaud", location="Charleston", industry="Other", total_laid_off=None,
                    percentage_laid_off=None, event_date="3/14/2022", stage="Post-IPO", funds_raised_millions=None),
        make_record("Bally's Interactive", location="Providence", industry=None, total_laid_off=None,
                    percentage_laid_off="0.15", event_date="1/18/2023", stage="Post-IPO", funds_raised_millions=946),
        make_record("Google", industry="Consumer", total_laid_off=12000, percentage_laid_off="0.06",
                    event_date="1/20/2023", stage="Post-IPO", funds_raised_millions=26),
        make_record("Meta", industry="Consumer", total_laid_off=11000, percentage_laid_off="0.13",
                    event_date="11/9/2022", stage="Post-IPO", funds_raised_millions=26000),
    )


@pytest.fixture
def dated_records() -> tuple:
    """Cleaned records with typed dates, for report tests."""
    return (
        make_record("Google", industry="Consumer", total_laid_off=12000, percentage_laid_off="0.06",
                    event_date=date(2023, 1, 20), stage="Post-IPO"),
        make_record("Meta", industry="Consumer", total_laid_off=11000, percentage_laid_off="0.13",
                    event_date=date(2022, 11, 9), stage="Post-IPO"),
        make_record("Amazon", industry="Retail", total_laid_off=10000, percentage_laid_off="0.03",
                    event_date=date(2022, 11, 16), stage="Post-IPO"),
        make_record("Amazon", industry="Retail", total_laid_off=8000, percentage_laid_off="0.02",
                    event_date=date(2023, 1, 4), stage="Post-IPO"),
        make_record("Katerra", industry="Construction", total_laid_off=2434, percentage_laid_off="1",
                    event_date=date(2021, 6, 1), stage="Unknown"),
        make_record("Britishvolt", industry="Transportation", total_laid_off=206, percentage_laid_off="1",
                    event_date=date(2023, 1, 17), stage="Unknown", country="United Kingdom"),
        make_record("Bally's Interactive", industry=None, total_laid_off=None, percentage_laid_off="0.15",
                    event_date=date(2023, 1, 18), stage="Post-IPO"),
        make_record("Undated", industry="Other", total_laid_off=40, percentage_laid_off="0.5",
                    event_date=None, stage="Seed"),
    )


@pytest.fixture
def sample_csv(tmp_path):
    """Path to a small layoffs CSV export."""
    path = tmp_path / "layoffs.csv"
    path.write_text("\n".join([CSV_HEADER, *SAMPLE_CSV_ROWS]) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def db_engine(tmp_path, monkeypatch):
    """A fresh SQLite database, also installed as the package default engine."""
    from layoffs import database

    engine = database.make_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    monkeypatch.setattr(database, "engine", engine)
    yield engine
    engine.dispose()
