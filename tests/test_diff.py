from __future__ import annotations

import textwrap

from todo_sync.tools.diff import parse_unified_diff

SAMPLE_DIFF = textwrap.dedent(
    """\
    diff --git a/src/app.py b/src/app.py
    index 1111111..2222222 100644
    --- a/src/app.py
    +++ b/src/app.py
    @@ -1,3 +1,4 @@
     def main():
    -    return 1
    +    # TODO return something useful
    +    return 2

    @@ -10 +11,2 @@ def other():
    --- not a header, a removed line
    +++ not a header, an added line
    +# FIXME tidy up
    diff --git a/old.py b/old.py
    deleted file mode 100644
    --- a/old.py
    +++ /dev/null
    @@ -1 +0,0 @@
    -# TODO gone
    diff --git a/new.txt b/new.txt
    new file mode 100644
    --- /dev/null
    +++ b/new.txt
    @@ -0,0 +1 @@
    +hello
    \\ No newline at end of file
    """
)


def test_parse_unified_diff_tracks_new_line_numbers() -> None:
    files = parse_unified_diff(SAMPLE_DIFF)

    assert [file_diff.to for file_diff in files] == ["src/app.py", "new.txt"]
    app = files[0]
    assert [(line.ln, line.content) for line in app.added_lines] == [
        (2, "    # TODO return something useful"),
        (3, "    return 2"),
        (11, "++ not a header, an added line"),
        (12, "# FIXME tidy up"),
    ]
    removed = [(line.ln, line.content) for line in app.lines if line.delete]
    assert removed == [(2, "    return 1"), (10, "-- not a header, a removed line")]


def test_parse_unified_diff_handles_new_files_and_empty_input() -> None:
    files = parse_unified_diff(SAMPLE_DIFF)
    assert [(line.ln, line.content) for line in files[1].added_lines] == [(1, "hello")]
    assert parse_unified_diff("") == []


QUOTED_DIFF = "\n".join(
    [
        r'diff --git "a/caf\303\251.py" "b/caf\303\251.py"',
        "new file mode 100644",
        "--- /dev/null",
        r'+++ "b/caf\303\251.py"',
        "@@ -0,0 +1 @@",
        "+# TODO handle accents properly",
        r'diff --git "a/say \"hi\".py" "b/say \"hi\".py"',
        "--- /dev/null",
        r'+++ "b/say \"hi\".py"',
        "@@ -0,0 +1 @@",
        "+pass",
        "",
    ]
)


def test_parse_unified_diff_unquotes_escaped_paths() -> None:
    files = parse_unified_diff(QUOTED_DIFF)

    assert [file_diff.to for file_diff in files] == ["café.py", 'say "hi".py']
    assert [(line.ln, line.content) for line in files[0].added_lines] == [
        (1, "# TODO handle accents properly"),
    ]
