import json
import re

import pytest
import requests
import responses

from blogserver.config import ES
from blogserver.search import (
    Article,
    EsClient,
    ExportedDoc,
    article_index,
    article_mapping,
    connect_es,
    export_articles,
    import_articles,
)

BASE = "http://localhost:9200"


@pytest.fixture
def client():
    return EsClient(BASE)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_article_index_name():
    assert article_index() == "article_index"


def test_article_mapping_dates_and_fields():
    props = article_mapping()["properties"]
    assert props["created_at"] == {"type": "date", "format": "yyyy-MM-dd HH:mm:ss"}
    assert set(props) == {
        "created_at", "updated_at", "cover", "title", "keyword", "category",
        "tags", "abstract", "content", "views", "comments", "likes",
    }
    assert props["views"]["type"] == "integer"


def test_article_defaults():
    article = Article(title="t")
    assert article.tags == []
    assert article.views == 0


def test_client_adds_scheme_and_auth():
    password = "password"
    es_client = connect_es(ES(url="localhost:9200", username="user", password=password))
    assert es_client.base_url == BASE
    assert es_client.session.auth == ("user", password)


def test_index_exists(client, mocked):
    mocked.add(responses.HEAD, f"{BASE}/article_index", status=200)
    assert client.index_exists("article_index") is True


def test_index_missing(client, mocked):
    mocked.add(responses.HEAD, f"{BASE}/article_index", status=404)
    assert client.index_exists("article_index") is False


def test_index_exists_error(client, mocked):
    mocked.add(responses.HEAD, f"{BASE}/article_index", status=500)
    with pytest.raises(requests.HTTPError):
        client.index_exists("article_index")


def test_index_create_sends_mapping(client, mocked):
    mocked.add(responses.PUT, f"{BASE}/article_index", json={"acknowledged": True})
    client.index_create("article_index", article_mapping())
    assert json.loads(mocked.calls[0].request.body) == {"mappings": article_mapping()}


def test_index_delete_error(client, mocked):
    mocked.add(responses.DELETE, f"{BASE}/article_index", status=404)
    with pytest.raises(requests.HTTPError):
        client.index_delete("article_index")


def _add_scroll_pages(mocked, first, rest):
    mocked.add(
        responses.POST,
        f"{BASE}/article_index/_search",
        json={"_scroll_id": "s1", "hits": {"hits": first}},
    )
    for page in rest:
        mocked.add(
            responses.POST,
            f"{BASE}/_search/scroll",
            json={"_scroll_id": "s2", "hits": {"hits": page}},
        )
    mocked.add(responses.DELETE, f"{BASE}/_search/scroll", json={"succeeded": True})


def test_scroll_all_collects_pages_and_clears(client, mocked):
    _add_scroll_pages(
        mocked,
        [{"_id": "1", "_source": {"title": "a"}}],
        [[{"_id": "2", "_source": {"title": "b"}}], []],
    )
    docs = list(client.scroll_all("article_index", 1000))
    assert docs == [ExportedDoc("1", {"title": "a"}), ExportedDoc("2", {"title": "b"})]
    search_body = json.loads(mocked.calls[0].request.body)
    assert search_body == {"size": 1000, "query": {"match_all": {}}}
    assert "scroll=1m" in mocked.calls[0].request.url
    assert mocked.calls[-1].request.method == "DELETE"
    assert json.loads(mocked.calls[-1].request.body) == {"scroll_id": "s2"}


def test_export_articles_writes_file(client, mocked, tmp_path):
    _add_scroll_pages(mocked, [{"_id": "1", "_source": {"title": "a"}}], [[]])
    path = export_articles(client, tmp_path)
    assert re.fullmatch(r"es_\d{8}\.json", path.name)
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "data": [{"id": "1", "doc": {"title": "a"}}]
    }


def test_export_empty_index_writes_null(client, mocked, tmp_path):
    _add_scroll_pages(mocked, [], [[]])
    path = export_articles(client, tmp_path)
    assert json.loads(path.read_text(encoding="utf-8")) == {"data": None}


def test_import_articles_recreates_index(client, mocked, tmp_path):
    source = tmp_path / "dump.json"
    source.write_text(
        json.dumps({"data": [{"id": "1", "doc": {"title": "a"}}, {"id": "2", "doc": {"title": "b"}}]}),
        encoding="utf-8",
    )
    mocked.add(responses.HEAD, f"{BASE}/article_index", status=200)
    mocked.add(responses.DELETE, f"{BASE}/article_index", json={"acknowledged": True})
    mocked.add(responses.PUT, f"{BASE}/article_index", json={"acknowledged": True})
    mocked.add(responses.POST, f"{BASE}/article_index/_bulk", json={"errors": False})

    assert import_articles(client, source) == 2
    methods = [c.request.method for c in mocked.calls]
    assert methods == ["HEAD", "DELETE", "PUT", "POST"]
    bulk = mocked.calls[-1].request
    assert "refresh=true" in bulk.url
    lines = [json.loads(line) for line in bulk.body.decode("utf-8").splitlines()]
    assert lines == [
        {"index": {"_id": "1"}}, {"title": "a"},
        {"index": {"_id": "2"}}, {"title": "b"},
    ]


def test_import_rejects_bad_file(client, tmp_path):
    source = tmp_path / "dump.json"
    source.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        import_articles(client, source)


def test_console_print_echoes_requests(capsys, mocked):
    mocked.add(responses.HEAD, f"{BASE}/article_index", status=200)
    es_client = connect_es(ES(url=BASE, is_console_print=True))
    assert es_client.index_exists("article_index") is True
    out = capsys.readouterr().out
    assert f"HEAD {BASE}/article_index" in out