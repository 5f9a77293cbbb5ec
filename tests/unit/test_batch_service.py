"""Unit tests for BatchIterator."""

import httpx
import pytest
import respx
from unittest.mock import AsyncMock

from nft_viewer.models.nft import BatchItemResult, CollectionMetadata
from nft_viewer.services.batch_service import BatchIterator, FailurePolicy, token_path
from nft_viewer.services.image_service import ImageMaterializer
from nft_viewer.services.token_service import TokenResolver
from nft_viewer.utils.errors import (
    ContractCallError,
    FetchError,
    MissingFieldError,
    NFTViewerError,
    TokenUriError,
)
from tests.fixtures.common import GATEWAY, make_png


def mock_collection_routes(router, token_ids, failing=()):
    """Register metadata and image routes for ``token_ids``."""
    routes = {}
    for token_id in token_ids:
        if token_id in failing:
            routes[token_id] = router.get(f"{GATEWAY}QmMeta/{token_id}").mock(
                side_effect=httpx.ConnectError("gateway unreachable")
            )
            continue
        routes[token_id] = router.get(f"{GATEWAY}QmMeta/{token_id}").mock(
            return_value=httpx.Response(200, json={
                "image": f"ipfs://QmImage/{token_id}",
                "attributes": [{"trait_type": "Id", "value": str(token_id)}],
            })
        )
        router.get(f"{GATEWAY}QmImage/{token_id}").mock(
            return_value=httpx.Response(200, content=make_png(2 + token_id, 2))
        )
    return routes


class TestBatchIterator:
    """Test suite for BatchIterator."""

    @pytest.fixture
    def collection(self):
        return CollectionMetadata(name="Apes", symbol="APE", base_uri="", total_supply=3)

    def make_iterator(self, fetcher, policy, concurrency=4, on_start=None):
        return BatchIterator(
            TokenResolver(fetcher),
            ImageMaterializer(fetcher),
            policy=policy,
            concurrency=concurrency,
            on_start=on_start
        )

    def test_token_path(self, tmp_path):
        assert token_path(tmp_path, 12) == tmp_path / "12.png"

    def test_policy_from_string(self, fetcher):
        assert self.make_iterator(fetcher, "abort").policy is FailurePolicy.ABORT_ON_FIRST
        assert self.make_iterator(fetcher, "collect").policy is FailurePolicy.COLLECT_ERRORS

    def test_invalid_settings(self, fetcher):
        with pytest.raises(ValueError):
            self.make_iterator(fetcher, "retry")
        with pytest.raises(ValueError):
            self.make_iterator(fetcher, "collect", concurrency=0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("policy", ["abort", "collect"])
    async def test_downloads_every_token(self, fetcher, mock_contract, collection, tmp_path, policy):
        started = []
        iterator = self.make_iterator(fetcher, policy, on_start=started.append)
        destination = tmp_path / "collection"

        with respx.mock as router:
            mock_collection_routes(router, range(3))
            results = await iterator.download_all(collection, mock_contract, destination)

        assert [r.token_id for r in results] == [0, 1, 2]
        assert all(r.ok for r in results)
        assert sorted(p.name for p in destination.iterdir()) == ["0.png", "1.png", "2.png"]
        assert sorted(started) == [0, 1, 2]
        assert sorted(call.args[0] for call in mock_contract.token_uri.await_args_list) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_empty_collection(self, fetcher, mock_contract, tmp_path):
        iterator = self.make_iterator(fetcher, "collect")

        results = await iterator.download_all(CollectionMetadata(), mock_contract, tmp_path / "empty")

        assert results == []
        assert (tmp_path / "empty").is_dir()
        mock_contract.token_uri.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_abort_stops_at_first_failure(self, fetcher, mock_contract, collection, tmp_path):
        iterator = self.make_iterator(fetcher, FailurePolicy.ABORT_ON_FIRST)

        with respx.mock(assert_all_called=False) as router:
            routes = mock_collection_routes(router, range(3), failing={1})
            with pytest.raises(FetchError):
                await iterator.download_all(collection, mock_contract, tmp_path)

        assert (tmp_path / "0.png").exists()
        assert not (tmp_path / "1.png").exists()
        assert not (tmp_path / "2.png").exists()
        assert not routes[2].called

    @pytest.mark.asyncio
    async def test_abort_with_uint256_supply(self, fetcher, mock_contract, tmp_path):
        iterator = self.make_iterator(fetcher, "abort")
        mock_contract.token_uri.side_effect = ContractCallError("execution reverted", method="tokenURI")
        collection = CollectionMetadata(total_supply=2 ** 64)

        with pytest.raises(NFTViewerError) as exc_info:
            await iterator.download_all(collection, mock_contract, tmp_path)

        assert isinstance(exc_info.value, TokenUriError)
        assert exc_info.value.token_id == 0
        mock_contract.token_uri.assert_awaited_once_with(0)

    @pytest.mark.asyncio
    async def test_collect_with_uint256_supply_runs_bounded_workers(self, fetcher, mock_contract, tmp_path):
        iterator = self.make_iterator(fetcher, "collect", concurrency=2)
        iterator._attempt = AsyncMock(side_effect=[
            BatchItemResult(token_id=0), BatchItemResult(token_id=1), RuntimeError("stop")
        ])

        with pytest.raises(RuntimeError):
            await iterator.download_all(CollectionMetadata(total_supply=2 ** 64), mock_contract, tmp_path)

        assert iterator._attempt.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("concurrency", [1, 4])
    async def test_collect_continues_past_failure(self, fetcher, mock_contract, collection, tmp_path, concurrency):
        iterator = self.make_iterator(fetcher, FailurePolicy.COLLECT_ERRORS, concurrency=concurrency)

        with respx.mock as router:
            mock_collection_routes(router, range(3), failing={1})
            results = await iterator.download_all(collection, mock_contract, tmp_path)

        assert [(r.token_id, r.ok) for r in results] == [(0, True), (1, False), (2, True)]
        assert isinstance(results[1].error, FetchError)
        assert results[1].path is None
        assert results[2].path == tmp_path / "2.png"
        assert (tmp_path / "0.png").exists()
        assert not (tmp_path / "1.png").exists()
        assert (tmp_path / "2.png").exists()

    @pytest.mark.asyncio
    async def test_collect_records_metadata_errors(self, fetcher, mock_contract, tmp_path):
        iterator = self.make_iterator(fetcher, "collect")
        collection = CollectionMetadata(total_supply=1)

        with respx.mock as router:
            router.get(f"{GATEWAY}QmMeta/0").mock(return_value=httpx.Response(200, json={"attributes": []}))
            results = await iterator.download_all(collection, mock_contract, tmp_path)

        assert isinstance(results[0].error, MissingFieldError)
        assert isinstance(results[0].error, NFTViewerError)

    @pytest.mark.asyncio
    async def test_download_one(self, fetcher, mock_contract, tmp_path):
        iterator = self.make_iterator(fetcher, "abort")

        with respx.mock as router:
            mock_collection_routes(router, [2])
            path = await iterator.download_one(2, mock_contract, tmp_path / "one")

        assert path == tmp_path / "one" / "2.png"
        assert path.exists()
