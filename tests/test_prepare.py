import pytest
import trio
import tern
from tern.models import CachePolicy


def add_header(name, value):
    def intercept(request):
        request.headers.add(name, value)
        return request

    return intercept


def async_add_header(name, value):
    async def intercept(request):
        await trio.sleep(0)
        request.headers.add(name, value)
        return request

    return intercept


@pytest.mark.parametrize(
    ["local_cache", "disable_http_cache", "policy"],
    [
        (False, False, CachePolicy.USE_PROTOCOL_CACHE_POLICY),
        (False, True, CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA),
        (True, False, CachePolicy.RETURN_CACHE_DATA_DONT_LOAD),
        (True, True, CachePolicy.RETURN_CACHE_DATA_DONT_LOAD),
    ],
)
def test_cache_policy(local_cache, disable_http_cache, policy):
    request = tern.Request(
        "http://example.com", disable_http_cache=disable_http_cache
    )
    assert tern.a.cache_policy(request, local_cache) is policy


def test_cache_policy_local_cache_disabled():
    request = tern.Request("http://example.com", disable_local_cache=True)

    assert (
        tern.a.cache_policy(request, False) is CachePolicy.USE_PROTOCOL_CACHE_POLICY
    )
    with pytest.raises(tern.LocalCacheDisabled):
        tern.a.cache_policy(request, True)


@pytest.mark.parametrize(
    ["url", "params", "expected"],
    [
        ("http://example.com/p", None, "http://example.com/p"),
        ("http://example.com/p", {}, "http://example.com/p"),
        ("http://example.com/p", {"b": 2, "a": 1}, "http://example.com/p?a=1&b=2"),
        (
            "http://example.com/p?x=1",
            {"b": 2, "a": 1},
            "http://example.com/p?x=1&a=1&b=2",
        ),
        ("http://example.com/p?x=1", None, "http://example.com/p?x=1"),
        (
            "http://example.com/p#frag",
            {"f": {"a": [1, 2]}},
            "http://example.com/p?f%5Ba%5D%5B%5D=1&f%5Ba%5D%5B%5D=2#frag",
        ),
        ("http://example.com", {"q": "a b&c"}, "http://example.com?q=a+b%26c"),
    ],
)
def test_prepare_url(url, params, expected):
    assert str(tern.a.prepare_url(url, params)) == expected


@pytest.mark.trio
async def test_prepare_request_no_params():
    request = tern.Request("http://example.com/a?x=1", headers={"Accept": "*/*"})
    prepared = await tern.a.prepare_request(request)

    assert prepared.method is tern.GET
    assert prepared.url == "http://example.com/a?x=1"
    assert prepared.body is None
    assert list(prepared.headers.items()) == [("Accept", "*/*")]
    assert prepared.timeout == 60.0
    assert prepared.cache_policy is CachePolicy.USE_PROTOCOL_CACHE_POLICY
    assert prepared.handle_cookies is True


@pytest.mark.trio
@pytest.mark.parametrize(
    "url",
    [
        "http://example.com/a%2Fb?z=1&a=2",
        "http://Example.COM/a?x=a+b&y#",
        "http://us%65r@example.com/?",
    ],
)
async def test_prepare_request_skip_encoding(url):
    request = tern.Request(url, params=tern.SkipEncoding())
    prepared = await tern.a.prepare_request(request)

    assert str(prepared.url) == url
    assert prepared.url is not request.url


@pytest.mark.trio
async def test_prepare_request_no_params_normalizes_url():
    request = tern.Request("http://Example.COM/a?x=a+b&y#")
    prepared = await tern.a.prepare_request(request)

    assert str(prepared.url) == "http://example.com/a?x=a+b&y"


@pytest.mark.trio
@pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
async def test_prepare_request_query(method):
    request = tern.Request(
        "http://example.com/search?x=1",
        method=method,
        params=tern.Query({"q": "tern", "page": 2}),
    )
    prepared = await tern.a.prepare_request(request)

    assert prepared.url == "http://example.com/search?x=1&page=2&q=tern"
    assert prepared.body is None
    assert "content-type" not in prepared.headers


@pytest.mark.trio
async def test_prepare_request_url_encoded():
    request = tern.Request(
        "http://example.com/form",
        method="POST",
        params=tern.URLEncoded({"name": "a b", "tags": ["x", "y"]}),
    )
    prepared = await tern.a.prepare_request(request)

    assert prepared.url == "http://example.com/form"
    assert prepared.body == b"name=a+b&tags%5B%5D=x&tags%5B%5D=y"
    assert prepared.headers["Content-Type"] == "application/x-www-form-urlencoded"


@pytest.mark.trio
async def test_prepare_request_json():
    request = tern.Request(
        "http://example.com",
        method=tern.PUT,
        params=tern.JSON({"hello": ["world", 1, {}]}),
    )
    prepared = await tern.a.prepare_request(request)

    assert prepared.body == b'{"hello":["world",1,{}]}'
    assert prepared.headers["Content-Type"] == "application/json"


@pytest.mark.trio
async def test_prepare_request_multipart():
    request = tern.Request(
        "http://example.com/upload",
        method="POST",
        params=tern.Multipart(
            form={"b": "2", "a": "1"},
            files={"f": tern.MultipartFile("x.txt", "text/plain", b"hi")},
        ),
    )
    prepared = await tern.a.prepare_request(request)

    assert prepared.body.startswith(b"--__X_NST_BOUNDARY__\r\n")
    assert prepared.body.endswith(b"--__X_NST_BOUNDARY__--\r\n")
    assert (
        prepared.headers["Content-Type"]
        == "multipart/form-data; boundary=__X_NST_BOUNDARY__"
    )


@pytest.mark.trio
async def test_prepare_request_raw_data():
    request = tern.Request(
        "http://example.com",
        method="PATCH",
        headers={"content-type": "text/plain"},
        params=tern.RawData(b"\x00\x01", "application/x-thing"),
    )
    prepared = await tern.a.prepare_request(request)

    assert prepared.body == b"\x00\x01"
    assert prepared.headers.get_all("Content-Type") == ["application/x-thing"]


@pytest.mark.trio
@pytest.mark.parametrize("method", ["GET", "HEAD", "OPTIONS", "TRACE", "PURGE"])
@pytest.mark.parametrize(
    "params",
    [
        tern.URLEncoded({"a": 1}),
        tern.JSON({"a": 1}),
        tern.Multipart(form={"a": "1"}),
        tern.RawData(b"", "text/plain"),
    ],
)
async def test_prepare_request_method_without_body(method, params):
    request = tern.Request("http://example.com", method=method, params=params)

    with pytest.raises(tern.MethodDoesNotSupportBody) as e:
        await tern.a.prepare_request(request)
    assert e.value.method == request.method


@pytest.mark.trio
async def test_prepare_request_custom_method_with_body():
    request = tern.Request(
        "http://example.com",
        method=tern.Method("PROPFIND", has_body=True),
        params=tern.RawData(b"<x/>", "application/xml"),
    )
    prepared = await tern.a.prepare_request(request)

    assert str(prepared.method) == "PROPFIND"
    assert prepared.body == b"<x/>"


@pytest.mark.trio
async def test_prepare_request_header_names_differing_in_case():
    request = tern.Request("http://example.com", headers={"X-A": "1", "x-a": "2"})
    prepared = await tern.a.prepare_request(request)

    assert prepared.headers.get_all("X-A") == ["2"]
    assert list(prepared.headers.items()) == [("x-a", "2")]


@pytest.mark.trio
async def test_prepare_request_default_headers():
    request = tern.Request("http://example.com", headers={"x-trace": "request"})
    prepared = await tern.a.prepare_request(
        request, default_headers={"X-Trace": "default", "User-Agent": "tern"}
    )

    assert prepared.headers.get_all("X-Trace") == ["request"]
    assert prepared.headers["user-agent"] == "tern"


@pytest.mark.trio
async def test_prepare_request_cache_policy():
    request = tern.Request("http://example.com", disable_http_cache=True)

    prepared = await tern.a.prepare_request(request)
    assert prepared.cache_policy is CachePolicy.RELOAD_IGNORING_LOCAL_CACHE_DATA

    prepared = await tern.a.prepare_request(request, local_cache=True)
    assert prepared.cache_policy is CachePolicy.RETURN_CACHE_DATA_DONT_LOAD


@pytest.mark.trio
async def test_prepare_request_local_cache_disabled():
    request = tern.Request("http://example.com", disable_local_cache=True)

    with pytest.raises(tern.LocalCacheDisabled):
        await tern.a.prepare_request(request, local_cache=True)


@pytest.mark.trio
async def test_interceptors_run_in_order():
    request = tern.Request(
        "http://example.com", async_interceptor=async_add_header("X-Order", "primary")
    )
    prepared = await tern.a.prepare_request(
        request,
        interceptors=[add_header("X-Order", "g1"), async_add_header("X-Order", "g2")],
    )

    assert prepared.headers.get_all("X-Order") == ["primary", "g1", "g2"]


@pytest.mark.trio
async def test_interceptors_registration_order_matters():
    def set_url(url):
        def intercept(request):
            request.url = url
            return request

        return intercept

    request = tern.Request("http://example.com")
    g1 = set_url("http://one.example.com")
    g2 = set_url("http://two.example.com")

    prepared = await tern.a.prepare_request(request, interceptors=[g1, g2])
    assert prepared.url == "http://two.example.com"

    prepared = await tern.a.prepare_request(request, interceptors=[g2, g1])
    assert prepared.url == "http://one.example.com"


@pytest.mark.trio
async def test_exclusive_interceptor_skips_global_interceptors():
    calls = []

    def counting(request):
        calls.append(request)
        return request

    request = tern.Request(
        "http://example.com",
        async_interceptor=async_add_header("X-Order", "primary"),
        exclusive_interceptor=True,
    )
    prepared = await tern.a.prepare_request(request, interceptors=[counting, counting])

    assert prepared.headers.get_all("X-Order") == ["primary"]
    assert calls == []


@pytest.mark.trio
async def test_async_interceptor_wins_over_sync():
    request = tern.Request(
        "http://example.com",
        interceptor=add_header("X-Order", "sync"),
        async_interceptor=async_add_header("X-Order", "async"),
    )
    prepared = await tern.a.prepare_request(request)

    assert prepared.headers.get_all("X-Order") == ["async"]


@pytest.mark.trio
async def test_sync_interceptor_exclusive():
    request = tern.Request(
        "http://example.com",
        interceptor=add_header("X-Order", "sync"),
        exclusive_interceptor=True,
    )
    prepared = await tern.a.prepare_request(
        request, interceptors=[add_header("X-Order", "global")]
    )

    assert prepared.headers.get_all("X-Order") == ["sync"]


def test_interceptor_chain_without_primary():
    g1 = add_header("X", "1")
    request = tern.Request("http://example.com", exclusive_interceptor=True)

    assert tern.a.interceptor_chain(request, [g1]) == [g1]


@pytest.mark.trio
async def test_interceptor_must_return_prepared_request():
    def broken(request):
        request.headers["X"] = "1"

    request = tern.Request("http://example.com", interceptor=broken)

    with pytest.raises(tern.ConfigurationError) as e:
        await tern.a.prepare_request(request)
    assert e.value.request is not None


@pytest.mark.trio
async def test_interceptor_errors_carry_request():
    def failing(request):
        raise tern.TernError("rejected")

    with pytest.raises(tern.TernError) as e:
        await tern.a.prepare_request(
            tern.Request("http://example.com"), interceptors=[failing]
        )
    assert e.value.request.url == "http://example.com"


@pytest.mark.trio
async def test_interceptors_not_started_when_cancelled():
    calls = []

    def counting(request):
        calls.append(request)
        return request

    prepared = tern.PreparedRequest(tern.GET, "http://example.com")
    with trio.CancelScope() as scope:
        scope.cancel()
        await tern.a.apply_interceptors(prepared, [counting])

    assert scope.cancelled_caught
    assert calls == []


@pytest.mark.trio
async def test_cancelled_between_interceptors():
    calls = []

    async def cancel_after(request):
        calls.append("first")
        scope.cancel()
        return request

    def second(request):
        calls.append("second")
        return request

    prepared = tern.PreparedRequest(tern.GET, "http://example.com")
    with trio.CancelScope() as scope:
        await tern.a.apply_interceptors(prepared, [cancel_after, second])

    assert calls == ["first"]


@pytest.mark.trio
async def test_asynchronize_defers_call():
    calls = []

    def interceptor(request):
        calls.append(request)
        return request

    wrapped = tern.a.asynchronize(interceptor)
    prepared = tern.PreparedRequest(tern.GET, "http://example.com")
    awaitable = wrapped(prepared)

    assert calls == []
    assert await awaitable is prepared
    assert calls == [prepared]
    assert wrapped.__name__ == "interceptor"


def test_compose():
    prepared = tern.PreparedRequest(tern.GET, "http://example.com")
    composed = tern.a.compose(add_header("X", "f"), add_header("X", "g"))

    assert composed(prepared) is prepared
    assert prepared.headers.get_all("X") == ["f", "g"]


def test_compose_empty_is_identity():
    prepared = tern.PreparedRequest(tern.GET, "http://example.com")
    assert tern.a.compose()(prepared) is prepared


def test_blocking_prepare_request():
    request = tern.Request(
        "http://example.com", params=tern.Query({"a": 1}), headers={"X": "1"}
    )
    prepared = tern.s.prepare_request(request, interceptors=[add_header("X", "2")])

    assert prepared.url == "http://example.com?a=1"
    assert prepared.headers.get_all("X") == ["1", "2"]
