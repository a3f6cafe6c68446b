"""Tests for the command line entry point."""

import pandas as pd
import pytest

from cli.main import build_parser, main

MODEL = """\
population 100;
infected 2;
latent 2 1;
asymptomatic 2 1 0.3;
symptomatic 3 1 0.5;
bedridden 4 2 0.5;
end 10;
place home 3 2 0.3;
place work 10 5 0.1;
role worker 0.5 home work (8-17 0.9);
role homebody 0.5 home;
"""


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "town.txt"
    path.write_text(MODEL)
    return path


def test_parser_defaults():
    args = build_parser().parse_args(["town.txt"])
    assert args.model == "town.txt"
    assert args.seed is None
    assert not args.no_headline
    assert args.log_level == "WARNING"


def test_prints_daily_csv(model_file, capsys):
    assert main([str(model_file), "--seed", "4"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "time,uninfected,latent,asymptomatic,symptomatic,bedridden,recovered,dead"
    assert lines[1] == "0,98,2,0,0,0,0,0"
    assert len(lines) == 12


def test_same_seed_same_output(model_file, capsys):
    main([str(model_file), "--seed", "4", "--no-headline"])
    first = capsys.readouterr().out
    main([str(model_file), "--seed", "4", "--no-headline"])
    second = capsys.readouterr().out

    assert first == second
    assert not first.startswith("time")


def test_output_file(model_file, tmp_path, capsys):
    output = tmp_path / "daily.csv"
    assert main([str(model_file), "--seed", "4", "--output", str(output)]) == 0

    daily = pd.read_csv(output)
    assert len(daily) == 11
    assert (daily.drop(columns="time").sum(axis=1) == 100).all()


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nowhere.txt")]) == 1
    assert capsys.readouterr().out == ""


def test_bad_model(tmp_path, capsys):
    path = tmp_path / "bad.txt"
    path.write_text("population 10;\n")

    assert main([str(path)]) == 1
    assert capsys.readouterr().out == ""
