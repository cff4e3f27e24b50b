"""End-to-end tests for the recompress_pdf command line."""

import pytest

import recompress_pdf


@pytest.fixture
def workdir(tmp_path, text_pdf, scan_pdf, invalid_pdf):
    (tmp_path / "letter.pdf").write_bytes(text_pdf)
    (tmp_path / "scan.pdf").write_bytes(scan_pdf)
    (tmp_path / "broken.pdf").write_bytes(invalid_pdf)
    return tmp_path


def test_writes_compressed_files(workdir, capsys):
    out_dir = workdir / "out"
    code = recompress_pdf.main([
        str(workdir / "letter.pdf"),
        str(workdir / "scan.pdf"),
        "--output-dir", str(out_dir),
        "-c", "70",
    ])

    assert code == 0
    assert (out_dir / "letter_compressed.pdf").read_bytes().startswith(b"%PDF")
    assert (out_dir / "scan_compressed.pdf").exists()
    assert "Batch complete: 2/2 files" in capsys.readouterr().out


def test_defaults_to_input_directory(workdir):
    assert recompress_pdf.main([str(workdir / "letter.pdf")]) == 0
    assert (workdir / "letter_compressed.pdf").exists()


def test_reports_failures_alongside_successes(workdir, capsys):
    code = recompress_pdf.main([
        str(workdir / "letter.pdf"),
        str(workdir / "broken.pdf"),
        "-q", "0.8",
    ])

    assert code == 1
    captured = capsys.readouterr()
    assert "Error compressing broken.pdf" in captured.err
    assert "Batch complete: 1/2 files" in captured.out
    assert (workdir / "letter_compressed.pdf").exists()
    assert not (workdir / "broken_compressed.pdf").exists()


def test_too_many_files(workdir, capsys):
    paths = []
    for i in range(6):
        path = workdir / f"copy{i}.pdf"
        path.write_bytes((workdir / "letter.pdf").read_bytes())
        paths.append(str(path))

    assert recompress_pdf.main(paths) == 2
    assert "up to 5 files" in capsys.readouterr().err


def test_missing_file_reported(workdir, capsys):
    code = recompress_pdf.main([str(workdir / "letter.pdf"), str(workdir / "nope.pdf")])
    assert code == 1
    assert "File not found" in capsys.readouterr().err


def test_invalid_quality(workdir):
    assert recompress_pdf.main([str(workdir / "letter.pdf"), "-q", "1.5"]) == 2


def test_resolve_quality_from_compression_percent():
    args = recompress_pdf.parse_args(["x.pdf", "-c", "25"])
    assert recompress_pdf.resolve_quality(args) == 0.75
