"""Article search index: mapping, index management, export and import."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

import requests

from blogserver.config import ES

SCROLL_KEEP_ALIVE = "1m"
EXPORT_PAGE_SIZE = 1000

_DATE_FORMAT = "yyyy-MM-dd HH:mm:ss"


@dataclass
class Article:
    """Article document stored in the search index."""

    created_at: str = ""
    updated_at: str = ""
    cover: str = ""
    title: str = ""
    keyword: str = ""
    category: str = ""
    tags: List[str] = field(default_factory=list)
    abstract: str = ""
    content: str = ""
    views: int = 0
    comments: int = 0
    likes: int = 0


@dataclass
class ExportedDoc:
    """One document of an export file: its identifier and raw source."""

    id: Optional[str]
    doc: Any


def article_index() -> str:
    """Name of the article index."""
    return "article_index"


def article_mapping() -> Dict[str, Any]:
    """Field mapping of the article index."""
    return {
        "properties": {
            "created_at": {"type": "date", "format": _DATE_FORMAT},
            "updated_at": {"type": "date", "format": _DATE_FORMAT},
            "cover": {"type": "text"},
            "title": {"type": "text"},
            "keyword": {"type": "keyword"},
            "category": {"type": "keyword"},
            "tags": {"type": "keyword"},
            "abstract": {"type": "text"},
            "content": {"type": "text"},
            "views": {"type": "integer"},
            "comments": {"type": "integer"},
            "likes": {"type": "integer"},
        }
    }


def _print_exchange(response: requests.Response, *args: Any, **kwargs: Any) -> None:
    request = response.request
    print(f"{request.method} {request.url}")
    if request.body:
        body = request.body
        print(body.decode("utf-8", "replace") if isinstance(body, bytes) else body)
    print(f"< {response.status_code}")
    if response.content:
        print(response.text)


class EsClient:
    """Minimal HTTP client for the search server."""

    def __init__(
        self,
        url: str,
        username: str = "",
        password: str = "",
        session: Optional[requests.Session] = None,
    ):
        if "://" not in url:
            url = "http://" + url
        self.base_url = url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        if username:
            self.session.auth = (username, password)

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        response = self.session.request(method, self.base_url + path, **kwargs)
        response.raise_for_status()
        return response

    def index_exists(self, name: str) -> bool:
        """Whether the index exists."""
        response = self.session.head(f"{self.base_url}/{name}")
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True

    def index_create(self, name: str, mapping: Dict[str, Any]) -> None:
        """Create an index with the given mapping."""
        self._request("PUT", f"/{name}", json={"mappings": mapping})

    def index_delete(self, name: str) -> None:
        """Delete an index."""
        self._request("DELETE", f"/{name}")

    def scroll_all(self, index: str, size: int = EXPORT_PAGE_SIZE) -> Iterator[ExportedDoc]:
        """Yield every document of the index, page by page, then release the scroll."""
        page = self._request(
            "POST",
            f"/{index}/_search",
            params={"scroll": SCROLL_KEEP_ALIVE},
            json={"size": size, "query": {"match_all": {}}},
        ).json()
        scroll_id = page.get("_scroll_id")
        yield from _hits(page)

        while True:
            page = self._request(
                "POST",
                "/_search/scroll",
                json={"scroll": SCROLL_KEEP_ALIVE, "scroll_id": scroll_id},
            ).json()
            scroll_id = page.get("_scroll_id", scroll_id)
            docs = list(_hits(page))
            if not docs:
                break
            yield from docs

        self._request("DELETE", "/_search/scroll", json={"scroll_id": scroll_id})

    def bulk_index(self, index: str, docs: Iterable[ExportedDoc]) -> Dict[str, Any]:
        """Index documents in one bulk request and refresh; returns the server reply."""
        lines = []
        for doc in docs:
            operation: Dict[str, Any] = {} if doc.id is None else {"_id": doc.id}
            lines.append(json.dumps({"index": operation}, ensure_ascii=False))
            lines.append(json.dumps(doc.doc, ensure_ascii=False))
        body = "".join(line + "\n" for line in lines).encode("utf-8")
        response = self._request(
            "POST",
            f"/{index}/_bulk",
            params={"refresh": "true"},
            data=body,
            headers={"Content-Type": "application/x-ndjson"},
        )
        return response.json()


def _hits(page: Dict[str, Any]) -> Iterator[ExportedDoc]:
    for hit in page.get("hits", {}).get("hits", []):
        yield ExportedDoc(id=hit.get("_id"), doc=hit.get("_source"))


def connect_es(es: ES) -> EsClient:
    """Client for the configured server, echoing traffic to stdout if asked to."""
    client = EsClient(es.url, es.username, es.password)
    if es.is_console_print:
        client.session.hooks["response"].append(_print_exchange)
    return client


def export_articles(client: EsClient, directory: "str | Path" = ".") -> Path:
    """Write every article to ``es_YYYYMMDD.json`` in ``directory``; returns its path."""
    docs = [asdict(doc) for doc in client.scroll_all(article_index(), EXPORT_PAGE_SIZE)]
    path = Path(directory) / f"es_{datetime.now():%Y%m%d}.json"
    payload = {"data": docs or None}
    path.write_text(
        json.dumps(payload, ensure_ascii=False, separators=(",", ":")), encoding="utf-8"
    )
    return path


def _read_export(path: "str | Path") -> List[ExportedDoc]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("export file must hold a JSON object")
    items = payload.get("data") or []
    if not isinstance(items, list):
        raise ValueError("export data must be a list")
    docs = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("export entries must be objects")
        docs.append(ExportedDoc(id=item.get("id"), doc=item.get("doc")))
    return docs


def import_articles(client: EsClient, path: "str | Path") -> int:
    """Recreate the article index from an export file; returns the number of documents."""
    docs = _read_export(path)
    index = article_index()
    if client.index_exists(index):
        client.index_delete(index)
    client.index_create(index, article_mapping())
    client.bulk_index(index, docs)
    return len(docs)