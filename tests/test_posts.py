from __future__ import annotations

import datetime as dt
from dataclasses import replace

import pytest

from webgen import posts as posts_module
from webgen.errors import PostsError, WebgenError
from webgen.posts import (
    PostInfo,
    extract_posts,
    post_output_dir,
    process_posts_dir,
    rebuild_post_tree,
    sort_posts,
)

from conftest import make_post, snapshot, write

SUMMARY = "{% for post in posts %}{{ post.key }}|{{ post.title }}|{{ post.formatted_date }}\n{% endfor %}"


@pytest.fixture
def site(tmp_path):
    site = tmp_path / "site"
    posts_root = site / "__src" / "POSTS"
    make_post(posts_root, "2023/first", "First", "2023-01-01")
    make_post(posts_root, "2024/latest", "Latest", "2024-06-01")
    make_post(posts_root, "2023/middle", "Middle", "2023-06-15")
    write(posts_root / "2023" / "first" / "photo.jpg", "jpeg bytes")
    write(posts_root / "2023" / "first" / "extras" / "nested.txt", "not copied")
    write(site / "__src" / "SUMMARY.template", SUMMARY)
    return site


def test_extract_two_level_posts(site, config):
    found = extract_posts(site / "__src" / "POSTS", config)

    assert sorted(post.key for post in found) == ["2023/first", "2023/middle", "2024/latest"]
    first = next(post for post in found if post.key == "2023/first")
    assert first == PostInfo("First", dt.date(2023, 1, 1), "3 min", "2023/first", 2023)


def test_extract_flat_posts_and_skips_reserved(tmp_path, config):
    posts_root = tmp_path / "POSTS"
    make_post(posts_root, "hello-world", "Hello", "2022-02-02")
    make_post(posts_root, "undated", "Undated")
    (posts_root / ".__src").mkdir()
    write(posts_root / "notes.txt", "loose file")

    found = extract_posts(posts_root, config)

    assert [post.key for post in found] == ["hello-world", "undated"]
    assert found[0].year == 2022
    assert found[1].year == 0


def test_missing_post_index_aborts_extraction(tmp_path, config):
    posts_root = tmp_path / "POSTS"
    make_post(posts_root, "good", "Good", "2022-02-02")
    (posts_root / "broken").mkdir()

    with pytest.raises(PostsError):
        extract_posts(posts_root, config)


def test_sort_by_date_descending():
    unsorted = [
        PostInfo("a", dt.date(2023, 1, 1), "", "a"),
        PostInfo("b", None, "", "b"),
        PostInfo("c", dt.date(2024, 6, 1), "", "c"),
        PostInfo("d", dt.date(2023, 6, 15), "", "d"),
    ]

    assert [post.date for post in sort_posts(unsorted)] == [
        dt.date(2024, 6, 1),
        dt.date(2023, 6, 15),
        dt.date(2023, 1, 1),
        None,
    ]


def test_process_posts_publishes_tree_and_summary(site, config, log):
    process_posts_dir(site, config, log)

    post_dir = site / "post"
    assert (post_dir / "2023" / "first" / "photo.jpg").read_text(encoding="utf-8") == "jpeg bytes"
    assert not (post_dir / "2023" / "first" / "extras").exists()
    assert not (post_dir / "2023" / "first" / "index.md").exists()
    staged = post_dir / "2024" / "latest" / ".__src" / "index.md"
    assert staged.read_bytes() == (site / "__src" / "POSTS" / "2024" / "latest" / "index.md").read_bytes()

    summary = (site / "__src" / "index.content").read_text(encoding="utf-8")
    assert summary == (
        "2024/latest|Latest|Jun 1, 2024\n"
        "2023/middle|Middle|Jun 15, 2023\n"
        "2023/first|First|Jan 1, 2023\n"
    )


def test_process_posts_removes_stale_output(site, config, log):
    write(site / "post" / "2019" / "gone" / "index.html", "old")

    process_posts_dir(site, config, log)

    assert not (site / "post" / "2019").exists()


def test_process_posts_is_idempotent(site, config, log):
    process_posts_dir(site, config, log)
    first = snapshot(site)
    process_posts_dir(site, config, log)

    assert snapshot(site) == first


def test_summary_without_template_is_empty(site, config, log):
    (site / "__src" / "SUMMARY.template").unlink()

    process_posts_dir(site, config, log)

    assert (site / "__src" / "index.content").read_text(encoding="utf-8") == ""


def test_summary_escapes_titles(tmp_path, config, log):
    site = tmp_path / "site"
    make_post(site / ".__src" / "POSTS", "fish", "Fish & Chips", "2020-01-01")
    write(site / ".__src" / "SUMMARY.template", SUMMARY)

    process_posts_dir(site, config, log)

    assert (site / ".__src" / "index.content").read_text(encoding="utf-8") == "fish|Fish &amp; Chips|Jan 1, 2020\n"
    assert (site / "post" / "fish" / ".__src" / "index.md").exists()


def test_copy_failure_skips_only_that_post(site, config, log, caplog, monkeypatch):
    real_copy = posts_module.copy_post

    def flaky_copy(post, *args):
        if post.key == "2023/middle":
            raise OSError("disk full")
        real_copy(post, *args)

    monkeypatch.setattr(posts_module, "copy_post", flaky_copy)
    posts_root = site / "__src" / "POSTS"
    found = sort_posts(extract_posts(posts_root, config))

    rebuild_post_tree(found, posts_root, site / "post", config, log)

    assert "ERROR: disk full" in caplog.text
    assert (site / "post" / "2023" / "first" / ".__src" / "index.md").exists()
    assert (site / "post" / "2024" / "latest" / ".__src" / "index.md").exists()


def test_directory_without_posts_is_noop(tmp_path, config, log):
    (tmp_path / "__src").mkdir()

    process_posts_dir(tmp_path, config, log)

    assert not (tmp_path / "post").exists()
    assert not (tmp_path / "__src" / "index.content").exists()


@pytest.mark.parametrize("name", ["", ".", "..", "a/b", "../elsewhere", "/tmp/post", "__src", ".POSTS"])
def test_post_output_must_be_a_plain_folder(site, config, log, name):
    bad = replace(config, post_output=name)
    before = snapshot(site)

    with pytest.raises(WebgenError):
        post_output_dir(site, bad)
    with pytest.raises(WebgenError):
        process_posts_dir(site, bad, log)

    assert snapshot(site) == before


def test_post_output_symlink_out_of_site_is_refused(site, config, tmp_path):
    outside = tmp_path / "outside"
    write(outside / "precious.txt", "keep me")
    (site / "post").symlink_to(outside, target_is_directory=True)

    with pytest.raises(WebgenError):
        post_output_dir(site, config)
    assert (outside / "precious.txt").exists()


def test_post_output_renamed(site, config, log):
    process_posts_dir(site, replace(config, post_output="articles"), log)

    assert (site / "articles" / "2024" / "latest" / ".__src" / "index.md").exists()
    assert not (site / "post").exists()


def test_summary_template_runtime_error_is_reported(tmp_path, config, log):
    site = tmp_path / "site"
    make_post(site / "__src" / "POSTS", "dated", "Dated", "2020-01-01")
    make_post(site / "__src" / "POSTS", "undated", "Undated")
    write(
        site / "__src" / "SUMMARY.template",
        "{% for post in posts|sort(attribute='date') %}{{ post.key }}{% endfor %}",
    )

    with pytest.raises(WebgenError, match="SUMMARY.template"):
        process_posts_dir(site, config, log)
