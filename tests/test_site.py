"""Tests for collecting, partitioning and ordering site items."""

import datetime as dt

import pytest

from inkpot.config import Layout
from inkpot.content import ContentKind
from inkpot.errors import IoError, ParseError, RenderError
from inkpot.site import build_context, collect, partition, sort_items

from conftest import make_item, write_source

UTC = dt.timezone.utc


def _ts(day: int) -> dt.datetime:
    return dt.datetime(2024, 5, day, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

class TestSortItems:
    def test_descending_by_timestamp(self):
        t1, t2, t3 = make_item("t1", _ts(1)), make_item("t2", _ts(9)), make_item("t3", _ts(5))
        assert [i.link for i in sort_items([t1, t2, t3])] == ["t2", "t3", "t1"]

    def test_equal_timestamps_keep_input_order(self):
        items = [make_item(name, _ts(3)) for name in ("c", "a", "b")]
        newer = make_item("new", _ts(4))
        ordered = sort_items(items[:2] + [newer] + items[2:])
        assert [i.link for i in ordered] == ["new", "c", "a", "b"]

    def test_compares_instants_across_offsets(self):
        early = make_item("early", dt.datetime(2024, 5, 1, 12, tzinfo=dt.timezone(dt.timedelta(hours=5))))
        late = make_item("late", dt.datetime(2024, 5, 1, 9, tzinfo=UTC))
        assert [i.link for i in sort_items([early, late])] == ["late", "early"]


class TestPartition:
    def test_splits_by_kind(self):
        a = make_item("a", _ts(1))
        p = make_item("p", _ts(2), ContentKind.PAGE)
        b = make_item("b", _ts(3))
        articles, pages = partition([a, p, b])
        assert articles == [a, b]
        assert pages == [p]


class TestBuildContext:
    def test_latest_article_is_first(self, settings):
        articles = sort_items([make_item("old", _ts(1)), make_item("new", _ts(2))])
        context = build_context(articles, [], settings)
        assert context["latest_article"] is articles[0]
        assert context["conf"]["title"] == "Test Site"

    def test_no_latest_article_without_articles(self, settings):
        context = build_context([], [make_item("p", _ts(1), ContentKind.PAGE)], settings)
        assert "latest_article" not in context


# ---------------------------------------------------------------------------
# collect
# ---------------------------------------------------------------------------

class TestCollect:
    def test_collects_and_orders(self, settings, site_dir):
        src = site_dir / "src"
        write_source(src, "old.md", "link: old\ntimestamp: '2024-01-01T00:00:00+00:00'\n")
        write_source(src, "new.md", "link: new\ntimestamp: '2024-06-01T00:00:00+00:00'\n")
        write_source(src, "about.md", "link: about\nkind: Page\n")
        site = collect(settings)
        assert [a.link for a in site.articles] == ["new", "old"]
        assert [p.link for p in site.pages] == ["about"]
        assert site.context["latest_article"].link == "new"
        assert site.context["articles"] == site.articles

    def test_skips_directories_and_dotfiles(self, settings, site_dir):
        src = site_dir / "src"
        write_source(src, "a.md", "link: a\n")
        (src / "drafts").mkdir()
        (src / ".a.md.swp").write_bytes(b"\x00garbage")
        site = collect(settings)
        assert [a.link for a in site.articles] == ["a"]

    def test_one_bad_file_aborts(self, settings, site_dir):
        src = site_dir / "src"
        write_source(src, "good.md", "link: good\n")
        (src / "bad.md").write_text("no delimiter here", encoding="utf-8")
        with pytest.raises(ParseError) as info:
            collect(settings)
        assert info.value.path == src / "bad.md"

    def test_missing_source_directory(self, settings, site_dir):
        (site_dir / "src").rmdir()
        with pytest.raises(IoError):
            collect(settings)

    def test_template_failure_happens_before_loading(self, settings, site_dir):
        (site_dir / "theme" / "post.html").write_text("{% if %}", encoding="utf-8")
        (site_dir / "src" / "bad.md").write_text("no delimiter", encoding="utf-8")
        with pytest.raises(RenderError):
            collect(settings)

    def test_custom_layout(self, settings, site_dir):
        (site_dir / "theme").rename(site_dir / "templates")
        write_source(site_dir / "posts", "a.md", "link: a\n")
        site = collect(settings, Layout(source_dir="posts", theme_dir="templates"))
        assert [a.link for a in site.articles] == ["a"]

    def test_theme_may_hold_binary_assets(self, settings, site_dir):
        (site_dir / "theme" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\xff")
        write_source(site_dir / "src", "a.md", "link: a\n")
        site = collect(settings)
        assert [a.link for a in site.articles] == ["a"]
