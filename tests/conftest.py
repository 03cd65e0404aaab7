"""Shared fixtures: small usage exports written to a temp dir."""

from pathlib import Path

import pytest

USAGE_EVENTS_CSV = """Date,Kind,Model,Max Mode,Input (w/ Cache Write),Input (w/o Cache Write),Cache Read,Output Tokens,Total Tokens,Cost
"2025-01-02T02:00:00.000Z","Included","auto","No","1,000","200","3,000","400","4,600","Included"
"2025-01-01T02:00:01.000Z","Errored, No Charge","auto","No","0","0","0","0","0","Included"
"2025-01-01T01:59:59.000Z","Included","gpt-5","Yes","10","20","30","40","100","0.35"
"2025-01-01T12:00:00.000Z","On-Demand","gpt-5","Yes","10","20","30","40","100","0.50"
"bad date","Included","auto","No","1","1","1","1","4","Included"
"2025-01-01T13:00:00.000Z","Included","auto"
"""

TOKENS_CSV = """Date,User,Kind,Max Mode,Model,Input (w/ Cache Write),Input (w/o Cache Write),Cache Read,Output,Total Tokens,Cost ($)
2025-01-01T10:00:00.000Z,You,,No,auto,100,200,150,50,500,Included
2025-01-01T11:00:00.000Z,You,,No,auto,10,20,30,40,100,0.20
"""

DETAILS_CSV = """Date,User,Kind,Max Mode,Model,Tokens,Cost ($)
2025-01-01T10:00:00.000Z,You,Errored (rate limit),Yes,auto,500,Included
2025-01-01T12:00:00.000Z,You,Included,No,,750,
"""

SNAPSHOT_CSV = """Date,Model,Cache Read,Cache Write,Input,Output,Total,API Cost,Cost to You
2025/01/01,auto,"1,000",100,50,20,100,$1.00,$0
,total,"1,000",100,50,20,100,$1.00,$0
2025/01/02,auto,"1,500",150,80,30,150,$1.50,$0
,total,"1,500",150,80,30,150,$1.50,$0
Total,,,,,,,,
2025/01/03,auto,200,10,5,2,40,$0.40,$0
2025/01/04,auto,600,30,15,6,90,$0.90,$0
"""


def _write(tmp_path: Path, name: str, content: str) -> str:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return str(path)


@pytest.fixture
def usage_events_csv(tmp_path: Path) -> str:
    return _write(tmp_path, "usage-events.csv", USAGE_EVENTS_CSV)


@pytest.fixture
def tokens_csv(tmp_path: Path) -> str:
    return _write(tmp_path, "usage-tokens.csv", TOKENS_CSV)


@pytest.fixture
def details_csv(tmp_path: Path) -> str:
    return _write(tmp_path, "usage-details.csv", DETAILS_CSV)


@pytest.fixture
def snapshot_csv(tmp_path: Path) -> str:
    return _write(tmp_path, "summary.csv", SNAPSHOT_CSV)
