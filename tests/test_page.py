"""Tests for the server-rendered search page."""

from unittest.mock import patch

from lafinder.params import MSG_KEYWORD_TOO_SHORT, MSG_NO_CATEGORY

from conftest import VIDEOS, seed


class TestIdlePage:

    def test_help_copy_before_searching(self, client):
        response = client.get("/")

        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert "Before you search" in html
        assert "No result" not in html
        assert '<details class="video"' not in html

    def test_checkboxes_default_checked(self, client):
        html = client.get("/").get_data(as_text=True)

        assert 'name="main" value="1" checked' in html
        assert 'name="toddler" value="1" checked' in html


class TestResults:

    def test_grouped_results(self, client):
        html = client.get("/?keyword=come+up+with&page=1&main=1&toddler=1").get_data(as_text=True)

        assert html.count('<details class="video"') == 2
        assert html.count('<details class="video" open>') == 1
        assert html.count('<details class="seg" open>') == 2
        assert "240503 - Phrasal verbs &amp; you" in html
        assert "&amp;amp;" not in html
        assert "https://www.youtube.com/embed/vidMainNew?start=12" in html
        assert "0:12" in html and "1:15" in html

    def test_keyword_highlighted(self, client):
        html = client.get("/?keyword=come+up+with").get_data(as_text=True)

        assert "she will <mark>come up with</mark> it" in html
        assert "<mark>COME UP WITH</mark>" in html

    def test_category_filter_from_url(self, client):
        html = client.get("/?keyword=come+up+with&main=0").get_data(as_text=True)

        assert "Toddler talk" in html
        assert "Phrasal verbs" not in html
        assert 'name="main" value="1" >' in html

    def test_repeated_flag_last_value_wins(self, client):
        html = client.get("/?keyword=come+up+with&main=0&main=1&toddler=0").get_data(as_text=True)

        assert "Phrasal verbs" in html
        assert "Toddler talk" not in html
        assert 'name="main" value="1" checked' in html

    def test_no_result(self, client):
        html = client.get("/?keyword=xylophone").get_data(as_text=True)

        assert "No result" in html
        assert "Before you search" not in html

    def test_caption_markup_is_escaped(self, make_app, tmp_path):
        db = seed(
            tmp_path / "x.db",
            VIDEOS[:1],
            [("vidMainNew", 1.0, 1.0, "<script>alert(1)</script> come up with")],
        )
        html = make_app(db).test_client().get("/?keyword=come+up+with").get_data(as_text=True)

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html

    def test_partial_render(self, client):
        response = client.get("/?keyword=come+up+with", headers={"X-Partial": "1"})

        html = response.get_data(as_text=True)
        assert "<html" not in html
        assert '<details class="video" open>' in html

    def test_datastore_error(self, make_app, tmp_path):
        response = make_app(tmp_path / "missing.db").test_client().get("/?keyword=come+up+with")

        assert response.status_code == 500
        assert "No result" in response.get_data(as_text=True)


class TestValidationGate:

    def test_short_keyword_not_searched(self, client):
        with patch("lafinder.app.search_transcripts") as search:
            html = client.get("/?keyword=ab").get_data(as_text=True)

        search.assert_not_called()
        assert f'<div class="alert" role="alert">{MSG_KEYWORD_TOO_SHORT}</div>' in html

    def test_no_category_not_searched(self, client):
        with patch("lafinder.app.search_transcripts") as search:
            html = client.get("/?keyword=come+up+with&main=0&toddler=0").get_data(as_text=True)

        search.assert_not_called()
        assert f'<div class="alert" role="alert">{MSG_NO_CATEGORY}</div>' in html

    def test_bad_flag_not_searched(self, client):
        with patch("lafinder.app.search_transcripts") as search:
            response = client.get("/?keyword=come+up+with&main=yes")

        search.assert_not_called()
        assert response.status_code == 200
        assert "Invalid value for &#39;main&#39;" in response.get_data(as_text=True)

    def test_script_gate_messages(self, client):
        html = client.get("/").get_data(as_text=True)

        assert "const MIN_KEYWORD = 3;" in html
        assert "X-Partial" in html

    def test_bad_flag_shows_default_boxes(self, client):
        html = client.get("/?keyword=come+up+with&main=yes&toddler=0").get_data(as_text=True)

        assert 'name="main" value="1" checked' in html
        assert 'name="toddler" value="1" checked' in html

    def test_history_script_reads_flags_like_the_server(self, client):
        html = client.get("/").get_data(as_text=True)

        # last value wins and only "0" unchecks, as in SearchParams.from_args
        assert "qs.getAll(name).pop()" in html
        assert "if (raw === '0') return false;" in html
        assert "qs.get('main') !== '0'" not in html


class TestPaginationControls:

    def test_middle_page(self, bulk_client):
        html = bulk_client.get("/?keyword=plan&page=2").get_data(as_text=True)

        for n in ("1", "2", "3"):
            assert f'data-page="{n}"' in html
        assert 'aria-label="previous page"' in html
        assert 'aria-label="next page"' in html
        assert 'class="current" aria-current="page">2</a>' in html
        assert "..." not in html
        assert "page=3" in html

    def test_first_page_has_no_previous(self, bulk_client):
        html = bulk_client.get("/?keyword=plan").get_data(as_text=True)

        assert 'aria-label="previous page"' not in html
        assert 'aria-label="next page"' in html

    def test_last_page_has_no_next(self, bulk_client):
        html = bulk_client.get("/?keyword=plan&page=3").get_data(as_text=True)

        assert 'aria-label="next page"' not in html

    def test_links_keep_filters(self, bulk_client):
        html = bulk_client.get("/?keyword=plan&main=1&toddler=0").get_data(as_text=True)

        # 13 main-channel rows -> two pages
        assert 'data-page="2"' in html
        assert "toddler=0" in html

    def test_huge_page_number(self, client):
        response = client.get("/?keyword=come+up+with&page=1000000000000000000")

        assert response.status_code == 200
        assert "No result" in response.get_data(as_text=True)

    def test_single_page_has_no_controls(self, client):
        html = client.get("/?keyword=come+up+with").get_data(as_text=True)

        assert '<nav class="pages"' not in html
