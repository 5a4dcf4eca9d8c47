"""Blogs API: tag buckets, comment and reaction facets, the view counter."""

from httpx import AsyncClient


async def _create(client: AsyncClient, **fields) -> dict:
    body = {"title": "Caching 101", "content": "TTL all the things", "author": "kim"}
    body.update(fields)
    response = await client.post("/api/v1/blogs", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def test_tags_are_deduplicated(client: AsyncClient) -> None:
    blog = await _create(client, tags=["python", "redis", "python"])
    assert blog["tags"] == ["python", "redis"]


async def test_removed_tag_bucket_is_invalidated(client: AsyncClient, cache) -> None:
    blog = await _create(client, tags=["python", "redis"])
    assert len((await client.get("/api/v1/blogs/tag/redis")).json()) == 1
    assert "blogs:tag:redis" in cache.keys()

    await client.put(f"/api/v1/blogs/{blog['id']}", json={"tags": ["python"]})

    assert "blogs:tag:redis" not in cache.keys()
    assert (await client.get("/api/v1/blogs/tag/redis")).json() == []
    assert len((await client.get("/api/v1/blogs/tag/python")).json()) == 1


async def test_list_filtered_by_tag(client: AsyncClient) -> None:
    await _create(client, tags=["python"])
    await _create(client, tags=["go"], author="lee")
    response = await client.get("/api/v1/blogs", params={"tag": "python"})
    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["blogs"][0]["tags"] == ["python"]


async def test_new_comment_visible_after_cached_read(client: AsyncClient) -> None:
    blog = await _create(client)
    url = f"/api/v1/blogs/{blog['id']}/comments"
    assert (await client.get(url)).json() == []

    created = await client.post(url, json={"author": "sam", "content": "nice"})
    assert created.status_code == 201

    comments = (await client.get(url)).json()
    assert [c["content"] for c in comments] == ["nice"]

    deleted = await client.delete(f"{url}/{created.json()['id']}")
    assert deleted.status_code == 200
    assert (await client.get(url)).json() == []


async def test_reaction_updates_post_and_facet(client: AsyncClient) -> None:
    blog = await _create(client)
    post_url = f"/api/v1/blogs/{blog['id']}"
    assert (await client.get(f"{post_url}/reactions")).json() == {}
    await client.get(post_url)

    response = await client.post(f"{post_url}/reactions", json={"reaction": "like"})
    assert response.json()["reactions"] == {"like": 1}

    assert (await client.get(f"{post_url}/reactions")).json() == {"like": 1}
    assert (await client.get(post_url)).json()["reactions"] == {"like": 1}


async def test_view_counter_is_never_cached(client: AsyncClient, cache) -> None:
    blog = await _create(client)
    url = f"/api/v1/blogs/{blog['id']}/views"

    await client.post(url)
    second = await client.post(url)
    current = await client.get(url)

    assert second.json()["views"] == 2
    assert current.json()["views"] == 2
    assert "x-cache" not in current.headers
    assert cache.keys().count(f"blogs:{blog['id']}:views") == 1


async def test_delete_blog_removes_facets(client: AsyncClient, cache) -> None:
    blog = await _create(client)
    await client.post(f"/api/v1/blogs/{blog['id']}/views")
    await client.get(f"/api/v1/blogs/{blog['id']}/comments")

    response = await client.delete(f"/api/v1/blogs/{blog['id']}")

    assert response.status_code == 200
    assert not [k for k in cache.keys() if k.startswith(f"blogs:{blog['id']}")]
    assert (await client.get(f"/api/v1/blogs/{blog['id']}")).status_code == 404


async def test_unknown_blog_views_not_found(client: AsyncClient) -> None:
    response = await client.post("/api/v1/blogs/nope/views")
    assert response.status_code == 404


async def test_view_counter_store_errors_report_zero(client: AsyncClient, cache, monkeypatch) -> None:
    blog = await _create(client)
    url = f"/api/v1/blogs/{blog['id']}/views"

    async def _broken(*args, **kwargs):
        raise ConnectionError("store down")

    monkeypatch.setattr(cache, "incr", _broken)
    monkeypatch.setattr(cache, "get_counter", _broken)

    recorded = await client.post(url)
    current = await client.get(url)
    assert recorded.status_code == 200
    assert recorded.json()["views"] == 0
    assert current.json()["views"] == 0
