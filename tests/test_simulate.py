import pandas as pd
import pytest
import yaml
from typer.testing import CliRunner

from epiflows import InputError, ValidationError, io_utils, simulate
from epiflows.experiments import run_grid


@pytest.fixture
def config_path(tmp_path, flows_df, locations_df):
    flows_df.to_csv(tmp_path / "flows.csv", index=False)
    locations_df["stay_obs"] = ["5", "4;6", "2;3;4"]
    locations_df.to_csv(tmp_path / "locations.csv", index=False)

    cfg = {
        "flows": "flows.csv",
        "locations": "locations.csv",
        "list_columns": ["stay_obs"],
        "vars": {
            "pop_size": "population",
            "duration_stay": "stay",
            "num_cases": "cases",
            "first_date": "first_case",
            "last_date": "last_case",
        },
        "source": "A",
        "n_sim": 200,
        "seed": 42,
        "incubation": {"distribution": "lognormal", "meanlog": 1.0, "sdlog": 0.4},
        "infectious": {"distribution": "normal", "mean": 4.0, "sd": 1.0},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return path


def _edit(path, **changes):
    cfg = yaml.safe_load(path.read_text())
    cfg.update(changes)
    path.write_text(yaml.safe_dump(cfg))


def test_run_summary(config_path):
    table = simulate.run(config_path)
    assert list(table.index) == ["B", "C"]
    assert (table["mean_cases"] > 0).all()
    # fixed seed → identical output
    pd.testing.assert_frame_equal(table, simulate.run(config_path))


def test_run_raw_with_output(config_path):
    _edit(config_path, return_all_simulations=True, output="out/raw.csv")
    table = simulate.run(config_path)
    assert table.shape == (200, 2)
    written = pd.read_csv(config_path.parent / "out" / "raw.csv", index_col=0)
    assert written.shape == (200, 2)


def test_run_with_observed_stays(config_path):
    cfg = yaml.safe_load(config_path.read_text())
    cfg["vars"]["duration_stay"] = "stay_obs"
    cfg["stay_model"] = "empirical"
    cfg["return_all_simulations"] = True
    config_path.write_text(yaml.safe_dump(cfg))

    table = simulate.run(config_path)
    assert table["B"].nunique() > 1


def test_missing_keys(config_path, tmp_path):
    cfg = yaml.safe_load(config_path.read_text())
    del cfg["source"]
    config_path.write_text(yaml.safe_dump(cfg))
    with pytest.raises(KeyError, match="source"):
        simulate.run(config_path)

    with pytest.raises(FileNotFoundError):
        simulate.run(tmp_path / "nope.yaml")


@pytest.mark.parametrize("n_sim", [2.7, "10"])
def test_non_integer_n_sim_is_rejected(config_path, n_sim):
    _edit(config_path, n_sim=n_sim)
    with pytest.raises(InputError, match="n_sim"):
        simulate.run(config_path)


def test_malformed_list_cell(tmp_path, locations_df):
    locations_df["stay_obs"] = ["5", "4;", "2;3"]
    path = tmp_path / "locations.csv"
    locations_df.to_csv(path, index=False)
    with pytest.raises(ValidationError, match="stay_obs"):
        io_utils.load_table(path, list_columns=["stay_obs"])


def test_grid_seeds_are_bound_to_grid_points(config_path):
    text = config_path.read_text()
    jobs = run_grid.build_jobs(["A", "B"], 3, 7, text, str(config_path.parent))
    assert [(j[0], j[1]) for j in jobs] == [
        ("A", 0), ("A", 1), ("A", 2), ("B", 0), ("B", 1), ("B", 2),
    ]
    again = run_grid.build_jobs(["A", "B"], 3, 7, text, str(config_path.parent))
    assert [j[2] for j in jobs] == [j[2] for j in again]
    assert len({j[2] for j in jobs}) == len(jobs)


def test_grid_worker(config_path):
    job = run_grid.build_jobs(["A"], 1, 0, config_path.read_text(), str(config_path.parent))[0]
    table = run_grid._worker(job)
    assert table["source"].tolist() == ["A", "A"]
    assert table["location"].tolist() == ["B", "C"]
    pd.testing.assert_frame_equal(table, run_grid._worker(job))


def test_grid_cli(config_path, tmp_path):
    runner = CliRunner()
    out = tmp_path / "runs.csv"

    result = runner.invoke(
        run_grid.app, ["A", "--config-path", str(config_path), "--dry-run"]
    )
    assert result.exit_code == 0
    assert "Grid size: 1" in result.output
    assert not out.exists()

    args = ["A", "-c", str(config_path), "-r", "2", "-p", "1", "-o", str(out)]
    result = runner.invoke(run_grid.app, args)
    assert result.exit_code == 0, result.output
    df = pd.read_csv(out)
    assert len(df) == 4
    assert list(df.columns[:4]) == ["source", "replicate", "seed", "location"]

    runner.invoke(run_grid.app, args)
    assert len(pd.read_csv(out)) == 8
