"""Tests for the view and download pipeline."""

import httpx
import pytest
import respx
from unittest.mock import AsyncMock, MagicMock

from nft_viewer.commands import NFTPipeline, ViewResult, open_pipeline
from nft_viewer.config import ViewerConfig
from nft_viewer.display.viewer import Viewer
from nft_viewer.models.nft import CollectionMetadata
from nft_viewer.utils.errors import ContractCallError, FetchError, TokenUriError, ValidationError
from tests.fixtures.common import CONTRACT_ADDRESS, GATEWAY, make_png


@pytest.fixture
def viewer(test_console):
    return Viewer(test_console)


@pytest.fixture
def pipeline(config, mock_contract, fetcher, viewer):
    return NFTPipeline(config, mock_contract, fetcher, viewer=viewer, surface=MagicMock())


def route_token(router, token_id, document=None):
    router.get(f"{GATEWAY}QmMeta/{token_id}").mock(return_value=httpx.Response(200, json=document or {
        "image": f"ipfs://QmImage/{token_id}",
        "attributes": [
            {"trait_type": "Eyes", "value": "Blue"},
            {"trait_type": "Hat", "value": "Red"},
        ],
    }))


class TestView:
    """Test suite for NFTPipeline.view."""

    @pytest.mark.asyncio
    async def test_collection_only(self, pipeline, mock_contract, test_console):
        result = await pipeline.view()

        assert result.token is None
        assert result.collection.name == "BoredApeYachtClub"
        mock_contract.token_uri.assert_not_awaited()

        output = test_console.file.getvalue()
        assert "→ Collection" in output
        assert CONTRACT_ADDRESS in output
        assert "Total Supply" in output
        assert "→ Single" not in output

    @pytest.mark.asyncio
    async def test_token_without_image(self, pipeline, test_console):
        pipeline.images.render = AsyncMock()

        with respx.mock as router:
            route_token(router, 1)
            result = await pipeline.view(token_id=1, show=False)

        assert isinstance(result, ViewResult)
        assert result.token.token_id == "1"
        pipeline.images.render.assert_not_awaited()

        output = test_console.file.getvalue()
        assert "→ Single" in output
        assert "→ Attributes" in output
        assert output.index("Eyes") < output.index("Hat")
        assert "→ Image" not in output

    @pytest.mark.asyncio
    async def test_token_with_image(self, pipeline, test_console):
        with respx.mock as router:
            route_token(router, 1)
            router.get(f"{GATEWAY}QmImage/1").mock(return_value=httpx.Response(200, content=make_png(6, 6)))
            await pipeline.view(token_id=1, show=True)

        pipeline.images.surface.draw.assert_called_once()
        assert pipeline.images.surface.draw.call_args.kwargs["y"] == 39
        assert "→ Image" in test_console.file.getvalue()

    @pytest.mark.asyncio
    async def test_collection_failures_still_displayed(self, pipeline, mock_contract, test_console):
        mock_contract.name.side_effect = ContractCallError("reverted", method="name")
        mock_contract.total_supply.side_effect = ContractCallError("reverted", method="totalSupply")

        result = await pipeline.view()

        assert result.collection == CollectionMetadata(
            name="", symbol="BAYC", base_uri="ipfs://QmBase/", total_supply=0
        )
        assert "→ Collection" in test_console.file.getvalue()

    @pytest.mark.asyncio
    async def test_token_uri_failure_aborts(self, pipeline, mock_contract, test_console):
        mock_contract.token_uri.side_effect = ContractCallError("reverted", method="tokenURI")

        with pytest.raises(TokenUriError):
            await pipeline.view(token_id=9)

        assert "→ Collection" not in test_console.file.getvalue()


class TestDownload:
    """Test suite for NFTPipeline.download."""

    @pytest.mark.asyncio
    async def test_whole_collection(self, pipeline, mock_contract, tmp_path, test_console):
        with respx.mock as router:
            for token_id in range(3):
                route_token(router, token_id)
                router.get(f"{GATEWAY}QmImage/{token_id}").mock(
                    return_value=httpx.Response(200, content=make_png())
                )
            results = await pipeline.download(output_dir=tmp_path)

        assert [r.token_id for r in results] == [0, 1, 2]
        assert sorted(p.name for p in tmp_path.iterdir()) == ["0.png", "1.png", "2.png"]
        assert mock_contract.token_uri.await_count == 3
        assert "Downloading:" in test_console.file.getvalue()

    @pytest.mark.asyncio
    async def test_single_token(self, pipeline, mock_contract, tmp_path):
        with respx.mock as router:
            route_token(router, 2)
            router.get(f"{GATEWAY}QmImage/2").mock(return_value=httpx.Response(200, content=make_png()))
            results = await pipeline.download(token_id=2, output_dir=tmp_path)

        assert len(results) == 1
        assert results[0].path == tmp_path / "2.png"
        assert [p.name for p in tmp_path.iterdir()] == ["2.png"]
        mock_contract.token_uri.assert_awaited_once_with(2)

    @pytest.mark.asyncio
    async def test_single_token_failure_propagates(self, pipeline, tmp_path):
        with respx.mock as router:
            router.get(f"{GATEWAY}QmMeta/2").mock(return_value=httpx.Response(502))
            with pytest.raises(FetchError):
                await pipeline.download(token_id=2, output_dir=tmp_path)

    def test_default_output_dir(self, mock_contract, fetcher, viewer):
        config = ViewerConfig(ipfs_gateway=GATEWAY, output_root="/data/nfts")
        pipeline = NFTPipeline(config, mock_contract, fetcher, viewer=viewer)

        assert str(pipeline.output_dir) == f"/data/nfts/{CONTRACT_ADDRESS}"


class TestOpenPipeline:
    """Test suite for open_pipeline."""

    @pytest.mark.asyncio
    async def test_invalid_address(self, config):
        with pytest.raises(ValidationError):
            async with open_pipeline("not-an-address", config):
                pass

    @pytest.mark.asyncio
    async def test_builds_clients(self, config, viewer):
        async with open_pipeline(CONTRACT_ADDRESS.lower(), config, viewer=viewer) as pipeline:
            assert pipeline.contract.address == CONTRACT_ADDRESS
            assert pipeline.tokens.uri_resolver.gateway == GATEWAY
            assert pipeline.batch.concurrency == config.batch_concurrency
