from copyprompt import (
    MAX_BYTES,
    TRUNCATION_MARKER,
    format_file,
    render_files_section,
    truncate_content,
)

from helpers import write_files


def test_small_file_is_verbatim(tmp_path):
    write_files(tmp_path, {"src/main.py": "print('hi')\n"})

    block = format_file(tmp_path / "src/main.py", workspace=tmp_path)

    assert block == "src/main.py:\n```py\nprint('hi')\n\n```\n"
    assert TRUNCATION_MARKER not in block


def test_crlf_line_endings_are_kept(tmp_path):
    path = tmp_path / "win.txt"
    path.write_bytes(b"a\r\nb\r\n")

    assert "a\r\nb\r\n" in format_file(path, workspace=tmp_path)


def test_extension_defaults_to_text(tmp_path):
    write_files(tmp_path, {"Makefile": "all:", ".bashrc": "x"})

    assert format_file(tmp_path / "Makefile", tmp_path).startswith("Makefile:\n```text\n")
    assert format_file(tmp_path / ".bashrc", tmp_path).startswith(".bashrc:\n```text\n")


def test_only_last_suffix_is_used(tmp_path):
    write_files(tmp_path, {"a.tar.gz": "x"})

    assert "```gz\n" in format_file(tmp_path / "a.tar.gz", tmp_path)


def test_label_without_workspace_is_bare_name(tmp_path):
    write_files(tmp_path, {"deep/dir/f.rs": "fn main() {}"})

    assert format_file(tmp_path / "deep/dir/f.rs").startswith("f.rs:\n")


def test_label_outside_workspace_is_absolute(tmp_path):
    write_files(tmp_path, {"outside/f.go": "package main"})
    workspace = tmp_path / "ws"
    workspace.mkdir()
    path = tmp_path / "outside/f.go"

    assert format_file(path, workspace).startswith(f"{path}:\n")


def test_oversized_content_keeps_head_and_tail():
    content = "H" * 400_000 + "T" * 400_000

    result = truncate_content(content)

    assert result.count(TRUNCATION_MARKER) == 1
    head, tail = result.split(f"\n\n{TRUNCATION_MARKER}\n\n")
    assert head == "H" * (MAX_BYTES // 2)
    assert tail == "T" * (MAX_BYTES // 2)


def test_threshold_counts_utf8_bytes():
    # 300k characters, 600k bytes: under the limit
    assert truncate_content("é" * 300_000) == "é" * 300_000
    # 400k characters, 800k bytes: over the limit
    result = truncate_content("é" * 400_000)
    assert result.count(TRUNCATION_MARKER) == 1
    assert result.startswith("é" * (MAX_BYTES // 2))
    assert result.endswith("é" * (MAX_BYTES // 2))


def test_content_at_threshold_is_untouched():
    content = "x" * MAX_BYTES

    assert truncate_content(content) == content


def test_custom_threshold(tmp_path):
    write_files(tmp_path, {"big.txt": "abcdefghij"})

    block = format_file(tmp_path / "big.txt", tmp_path, max_bytes=4)

    assert block == f"big.txt:\n```txt\nab\n\n{TRUNCATION_MARKER}\n\nij\n```\n"


def test_undecodable_file_gets_placeholder(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\xff\xfe\x00\x81")

    block = format_file(path, tmp_path)

    assert block.startswith("blob.bin:\n```bin\n<<Unable to read file: ")
    assert block.endswith(">>\n```\n")


def test_missing_file_gets_placeholder(tmp_path):
    block = format_file(tmp_path / "gone.py", tmp_path)

    assert "<<Unable to read file: " in block
    assert block.startswith("gone.py:\n```py\n")


def test_files_section_keeps_given_order(tmp_path):
    names = [f"f{i:02}.txt" for i in range(20)]
    write_files(tmp_path, {name: name.upper() for name in names})
    files = [tmp_path / name for name in names]

    section = render_files_section(files, tmp_path, max_workers=4)

    positions = [section.index(f"{name}:\n") for name in names]
    assert positions == sorted(positions)
    assert section.startswith("## Files\nf00.txt:\n```txt\nF00.TXT\n```\n")


def test_empty_files_section():
    assert render_files_section([]) == "## Files"
