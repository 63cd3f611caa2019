import check_data
from conftest import make_artwork


def test_reports_counts_and_status(app, write_data, capsys) -> None:
    write_data("submissions", [
        make_artwork(1),
        make_artwork(2, status="pending"),
        make_artwork(3, status="pending"),
    ])
    assert check_data.main(app.config["DATA_DIR"]) == 0
    out = capsys.readouterr().out
    assert "File: submissions.json" in out
    assert "Record count: 3" in out
    assert "By status: approved=1, pending=2" in out
    assert "password" not in out


def test_missing_file_is_reported(app, capsys) -> None:
    (app.config["DATA_DIR"] / "reports.json").unlink()
    check_data.main(app.config["DATA_DIR"])
    assert "(missing)" in capsys.readouterr().out


def test_missing_directory(tmp_path, capsys) -> None:
    assert check_data.main(tmp_path / "absent") == 1
    assert "Directory not found" in capsys.readouterr().out
