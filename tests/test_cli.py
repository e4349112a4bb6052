"""Tests for the command line entry point."""

import json

from texture_match.cli import main

from conftest import encode


def write_index(tmp_path, index):
    path = tmp_path / "index.json"
    path.write_text(json.dumps(index.to_document()))
    return str(path)


def write_photo(tmp_path, image_rgb, name="photo.png"):
    path = tmp_path / name
    path.write_bytes(encode(image_rgb))
    return str(path)


class TestMain:

    def test_prints_ranked_results(self, tmp_path, capsys, noise_rgb, multi_sample_index):
        code = main([write_photo(tmp_path, noise_rgb),
                     "--index", write_index(tmp_path, multi_sample_index)])
        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("1. ")
        assert len(out.strip().splitlines()) == 3

    def test_json_output(self, tmp_path, capsys, noise_rgb, multi_sample_index):
        code = main([write_photo(tmp_path, noise_rgb),
                     "--index", write_index(tmp_path, multi_sample_index),
                     "--top-k", "2", "--json"])
        results = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [r["rank"] for r in results] == [1, 2]
        assert results[0]["confidence"] == 0.95

    def test_blank_photo_message(self, tmp_path, capsys, two_label_index):
        import numpy as np
        black = np.zeros((64, 64, 3), dtype=np.uint8)
        code = main([write_photo(tmp_path, black),
                     "--index", write_index(tmp_path, two_label_index)])
        assert code == 0
        assert "No usable match" in capsys.readouterr().out

    def test_decode_error_exit_code(self, tmp_path, capsys, two_label_index):
        photo = tmp_path / "broken.jpg"
        photo.write_bytes(b"not an image")
        code = main([str(photo), "--index", write_index(tmp_path, two_label_index)])
        assert code == 2
        assert "error:" in capsys.readouterr().err

    def test_bad_index_exit_code(self, tmp_path, capsys, noise_rgb):
        index = tmp_path / "index.json"
        index.write_text('{"entries": [{"labelKey": "oak"}]}')
        code = main([write_photo(tmp_path, noise_rgb), "--index", str(index)])
        assert code == 2

    def test_non_utf8_index_exit_code(self, tmp_path, capsys, noise_rgb):
        index = tmp_path / "index.json"
        index.write_bytes(b"\xff\xfe\x00garbage")
        code = main([write_photo(tmp_path, noise_rgb), "--index", str(index)])
        assert code == 2
        assert "error:" in capsys.readouterr().err
