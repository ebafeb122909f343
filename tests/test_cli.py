"""
Smoke tests for the command line entry points.
"""
from click.testing import CliRunner

from cli import cli


def test_season_with_playoffs():
    result = CliRunner().invoke(cli, ["season", "--teams", "2", "--overs", "1", "--seed", "4", "--playoffs"])
    assert result.exit_code == 0, result.output
    assert "Points Table" in result.output
    assert "Final:" in result.output
    assert "Champions:" in result.output


def test_auction():
    result = CliRunner().invoke(
        cli, ["auction", "--teams", "2", "--budget", "1000", "--squad-size", "3", "--pool", "8", "--seed", "1"],
    )
    assert result.exit_code == 0, result.output
    assert "Purses" in result.output
    assert "Unsold:" in result.output
