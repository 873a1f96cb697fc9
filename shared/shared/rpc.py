import httpx

from .breaker import CircuitBreaker, CircuitBreakerOpen
from .errors import InfrastructureError, SlugError, kind_for_status

DEFAULT_TIMEOUT = 3.0


def _upstream_error(response: httpx.Response, url: str) -> SlugError:
    kind = kind_for_status(response.status_code)
    slug = None
    message = response.text
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        slug = body.get("slug")
        message = body.get("message") or body.get("detail") or message
    if kind is InfrastructureError:
        return InfrastructureError(f"upstream {url} failed with {response.status_code}: {message}", slug or "upstream-error")
    return kind(str(message), slug)


async def call_with_breaker(
    breaker: CircuitBreaker | None,
    method: str,
    url: str,
    payload: dict | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
):
    """
    Call another bounded context.

    Upstream 4xx responses are re-raised with the same error kind and slug;
    timeouts, connection problems, 5xx responses and an open breaker surface
    as InfrastructureError.
    """
    if breaker is not None:
        try:
            await breaker.allow_request()
        except CircuitBreakerOpen as e:
            raise InfrastructureError(str(e), "circuit-breaker-open")

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            resp = await client.request(method=method, url=url, json=payload)
    except httpx.TimeoutException:
        if breaker is not None:
            await breaker.record_failure()
        raise InfrastructureError(f"Timeout calling upstream: {url}", "upstream-timeout")
    except httpx.HTTPError as e:
        if breaker is not None:
            await breaker.record_failure()
        raise InfrastructureError(f"Bad gateway calling upstream {url}: {e}", "upstream-unreachable")

    if resp.status_code >= 500:
        if breaker is not None:
            await breaker.record_failure()
        raise _upstream_error(resp, url)

    # a 4xx is a business answer, the upstream itself is healthy
    if breaker is not None:
        await breaker.record_success()

    if resp.status_code >= 400:
        raise _upstream_error(resp, url)

    if resp.content:
        return resp.json()
    return {}
