import asyncio

import pytest

from conftest import FakeFetcher, json_response
from tool_agent.tools.database import DANGEROUS_KEYWORDS, check_query
from tool_agent.tools.filesystem import sandbox_path
from tool_agent.tools.registry import ToolRegistry, build_registry
from tool_agent.tools.web import FORECAST_URL, GEOCODING_URL, FetchResponse, UrllibFetcher


def _run(registry: ToolRegistry, name: str, params: dict) -> dict:
    return asyncio.run(registry.execute_tool(name, params))


def test_write_then_read_round_trips(registry: ToolRegistry) -> None:
    written = _run(registry, "write_file", {"filename": "notes.txt", "content": "héllo\nworld"})
    read = _run(registry, "read_file", {"filename": "notes.txt"})

    assert written["success"] is True
    assert read == {"success": True, "content": "héllo\nworld"}


def test_write_with_traversal_stays_in_sandbox(registry: ToolRegistry, sandbox) -> None:
    result = _run(registry, "write_file", {"filename": "../../escape.txt", "content": "x"})

    assert result["success"] is True
    assert (sandbox / "escape.txt").read_text(encoding="utf-8") == "x"
    assert not (sandbox.parent / "escape.txt").exists()
    assert sandbox_path(sandbox, "..\\..\\win.txt") == sandbox / "win.txt"


def test_read_missing_file_returns_failure(registry: ToolRegistry) -> None:
    result = _run(registry, "read_file", {"filename": "users.txt"})

    assert result["success"] is False
    assert "users.txt" in result["error"]


def test_invalid_filename_returns_failure(registry: ToolRegistry) -> None:
    result = _run(registry, "read_file", {"filename": "../"})

    assert result["success"] is False


def test_list_files_is_sorted(registry: ToolRegistry) -> None:
    _run(registry, "write_file", {"filename": "b.txt", "content": "b"})
    _run(registry, "write_file", {"filename": "a.txt", "content": "a"})

    result = _run(registry, "list_files", {})

    assert result["success"] is True
    assert [name for name in result["files"] if name.endswith(".txt")] == ["a.txt", "b.txt"]


def test_query_database_returns_engineers(registry: ToolRegistry) -> None:
    result = _run(
        registry,
        "query_database",
        {"query": "select name from users where department = 'Engineering' order by id"},
    )

    assert result["success"] is True
    assert result["results"] == [{"name": "Alice Johnson"}, {"name": "Carol Davis"}]
    assert result["count"] == len(result["results"])


def test_query_database_seeds_only_once(database) -> None:
    database.migrate()

    assert len(database.query("SELECT * FROM users")) == 4


def test_query_database_rejects_non_select(registry: ToolRegistry) -> None:
    result = _run(registry, "query_database", {"query": "PRAGMA table_info(users)"})

    assert result == {"success": False, "error": "Only SELECT queries are allowed"}


@pytest.mark.parametrize(
    ("query", "keyword"),
    [
        ("SELECT * FROM users; drop table users", "DROP"),
        ("SELECT name FROM users -- comment", "--"),
        ("select name from users union select email from users", "UNION"),
        ("SELECT /* hidden */ name FROM users", "/*"),
    ],
)
def test_query_database_blocks_keywords(registry: ToolRegistry, query: str, keyword: str) -> None:
    result = _run(registry, "query_database", {"query": query})

    assert result == {"success": False, "error": f"Blocked dangerous keyword: {keyword}"}


def test_blocklist_matches_substrings() -> None:
    # "created_at" contains CREATE; the blocklist is advisory, not a parser.
    assert check_query("SELECT created_at FROM users") == "Blocked dangerous keyword: CREATE"
    assert "EXECUTE" in DANGEROUS_KEYWORDS


def test_query_database_enforces_length_cap(registry: ToolRegistry) -> None:
    query = "SELECT name FROM users WHERE name = '" + "a" * 500 + "'"

    result = _run(registry, "query_database", {"query": query})

    assert result == {"success": False, "error": "Query too long (max 500 characters)"}


def test_query_database_reports_sql_errors(registry: ToolRegistry) -> None:
    result = _run(registry, "query_database", {"query": "SELECT * FROM missing_table"})

    assert result["success"] is False
    assert "missing_table" in result["error"]


def test_get_weather_composes_geocode_and_forecast(sandbox, database) -> None:
    fetcher = FakeFetcher(
        {
            GEOCODING_URL: json_response(
                {
                    "results": [
                        {"name": "Tokyo", "country": "Japan", "latitude": 35.7, "longitude": 139.7}
                    ]
                }
            ),
            FORECAST_URL: json_response(
                {
                    "current": {
                        "temperature_2m": 15.2,
                        "relative_humidity_2m": 60,
                        "weather_code": 2,
                        "wind_speed_10m": 11.0,
                    }
                }
            ),
        }
    )
    registry = build_registry(sandbox_dir=sandbox, database=database, fetcher=fetcher)

    result = _run(registry, "get_weather", {"city": "Tokyo"})

    assert result == {
        "success": True,
        "weather": {
            "city": "Tokyo, Japan",
            "temperature": 15.2,
            "condition": "Partly cloudy",
            "humidity": 60,
            "windSpeed": 11.0,
        },
    }
    assert fetcher.calls[0] == (
        GEOCODING_URL,
        {"name": "Tokyo", "count": 1, "language": "en", "format": "json"},
    )
    assert fetcher.calls[1][1]["latitude"] == 35.7


def test_get_weather_unknown_city_skips_forecast(sandbox, database) -> None:
    fetcher = FakeFetcher({GEOCODING_URL: json_response({"generationtime_ms": 0.4})})
    registry = build_registry(sandbox_dir=sandbox, database=database, fetcher=fetcher)

    result = _run(registry, "get_weather", {"city": "Atlantis"})

    assert result == {"success": False, "error": "City not found"}
    assert [url for url, _ in fetcher.calls] == [GEOCODING_URL]


def test_get_weather_network_error_is_reported(sandbox, database) -> None:
    fetcher = FakeFetcher({GEOCODING_URL: OSError("connection refused")})
    registry = build_registry(sandbox_dir=sandbox, database=database, fetcher=fetcher)

    result = _run(registry, "get_weather", {"city": "Paris"})

    assert result == {"success": False, "error": "connection refused"}


def test_http_get_truncates_body(sandbox, database) -> None:
    fetcher = FakeFetcher({"https://example.com": FetchResponse(status=200, text="x" * 5000)})
    registry = build_registry(sandbox_dir=sandbox, database=database, fetcher=fetcher)

    result = _run(registry, "http_get", {"url": "https://example.com/page"})

    assert result["success"] is True
    assert result["status"] == 200
    assert len(result["data"]) == 1000


def test_http_get_connection_error_is_reported(registry: ToolRegistry) -> None:
    result = _run(registry, "http_get", {"url": "https://unreachable.invalid"})

    assert result["success"] is False
    assert "no route" in result["error"]


def test_http_get_refuses_file_urls(sandbox, database, tmp_path) -> None:
    secret = tmp_path / "outside_secret.txt"
    secret.write_text("TOP-SECRET", encoding="utf-8")
    registry = build_registry(sandbox_dir=sandbox, database=database, fetcher=UrllibFetcher())

    result = _run(registry, "http_get", {"url": secret.as_uri()})

    assert result == {"success": False, "error": "Unsupported URL scheme: file"}


def test_urllib_fetcher_rejects_non_http_schemes(tmp_path) -> None:
    target = tmp_path / "page.txt"
    target.write_text("local", encoding="utf-8")

    with pytest.raises(ValueError, match="Unsupported URL scheme: file"):
        asyncio.run(UrllibFetcher().get(target.as_uri()))


def test_http_get_bounds_the_body_read(sandbox, database) -> None:
    fetcher = FakeFetcher({"https://example.com": FetchResponse(status=200, text="ok")})
    registry = build_registry(
        sandbox_dir=sandbox, database=database, fetcher=fetcher, http_max_chars=50
    )

    _run(registry, "http_get", {"url": "https://example.com/big"})

    assert fetcher.max_bytes == [200]


def test_query_database_hex_encodes_blobs(registry: ToolRegistry) -> None:
    result = _run(registry, "query_database", {"query": "SELECT x'ff00' AS b"})

    assert result == {"success": True, "results": [{"b": "ff00"}], "count": 1}
