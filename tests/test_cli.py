import json

from product_dedup.cli import main

from conftest import RED, solid


def write_images(tmp_path):
    paths = {}
    for name, image in (("new", solid()), ("rouge", solid(RED)), ("serum", solid())):
        path = tmp_path / f"{name}.png"
        image.save(path, format="PNG")
        paths[name] = str(path)
    return paths


def test_check_writes_result_and_scores(tmp_path, capsys):
    paths = write_images(tmp_path)
    catalog = tmp_path / "catalog.json"
    catalog.write_text(
        json.dumps(
            [
                {"id": "p1", "name": "Rouge", "imageUrl": paths["rouge"]},
                {"id": "p2", "name": "Serum", "imageUrl": paths["serum"]},
                {"id": "p3", "name": "No photo", "imageUrl": ""},
            ]
        ),
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"

    code = main(
        [
            "check",
            "--image",
            paths["new"],
            "--catalog",
            str(catalog),
            "--out",
            str(out_dir),
            "--no-progress",
        ]
    )

    assert code == 0
    payload = json.loads((out_dir / "result.json").read_text(encoding="utf-8"))
    assert payload["isMatch"] is True
    assert payload["matchedProduct"]["id"] == "p2"
    assert payload["skipped"] == 1
    assert (out_dir / "scores.parquet").exists()
    assert "[match] Serum (p2)" in capsys.readouterr().out


def test_compare_prints_components(tmp_path, capsys):
    paths = write_images(tmp_path)
    assert main(["compare", paths["new"], paths["rouge"]]) == 0
    output = capsys.readouterr().out
    assert "hash similarity:  100.0%" in output
    assert "color similarity: 0.0%" in output
    assert "combined:         60.0%" in output


def test_config_file_changes_thresholds(tmp_path, capsys):
    paths = write_images(tmp_path)
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps([{"id": "p1", "name": "Rouge", "imageUrl": paths["rouge"]}]))
    config = tmp_path / "config.yaml"
    config.write_text("match_threshold: 55\n", encoding="utf-8")

    main(["--config", str(config), "check", "--image", paths["new"], "--catalog", str(catalog), "--no-progress"])

    assert "[match] Rouge (p1)" in capsys.readouterr().out
