"""Tests for provider ranking and the static directory."""

import json

import pytest

from booking_orchestrator.conversation.errors import LookupFailure
from booking_orchestrator.tools.providers import (
    PROVIDER_CATALOG,
    StaticProviderDirectory,
    accepts_insurance,
    matches_location,
    rank_providers,
)
from tests.conftest import make_provider


class TestInsuranceMatching:
    def test_exact_plan(self):
        assert accepts_insurance(make_provider(), "Blue Cross Blue Shield")

    def test_case_insensitive_substring(self):
        provider = make_provider(accepted_insurance=["Aetna PPO"])
        assert accepts_insurance(provider, "aetna")

    def test_universal_marker(self):
        provider = make_provider(accepted_insurance=["Most major plans"])
        assert accepts_insurance(provider, "Obscure Mutual")

    def test_rejects_other_plan(self):
        assert not accepts_insurance(make_provider(), "Cigna")

    @pytest.mark.parametrize("entries", [[""], ["   "], ["", "Aetna"]])
    def test_blank_entries_never_match(self, entries):
        assert not accepts_insurance(make_provider(accepted_insurance=entries), "Cigna")

    def test_broader_catalog_plan_covers_specific_profile_plan(self):
        provider = make_provider(accepted_insurance=["Aetna"])
        assert accepts_insurance(provider, "Aetna PPO")


class TestLocationMatching:
    def test_matches_location_field(self):
        assert matches_location(make_provider(), "san francisco")

    def test_matches_address(self):
        provider = make_provider(location="Bay Area", address="1 Main St, Oakland, CA")
        assert matches_location(provider, "Oakland")

    def test_blank_location_never_matches(self):
        assert not matches_location(make_provider(), "  ")


class TestRankProviders:
    def test_insurance_filter(self):
        providers = [
            make_provider(1, accepted_insurance=["Aetna"]),
            make_provider(2, accepted_insurance=["Cigna"]),
        ]
        ranked = rank_providers(providers, insurance="Cigna")
        assert [p.provider_id for p in ranked] == ["prov_002"]

    def test_location_before_rating(self):
        providers = [
            make_provider(1, location="Oakland, CA", address="Oakland", rating=5.0),
            make_provider(2, rating=4.0),
        ]
        ranked = rank_providers(providers, location="San Francisco")
        assert [p.provider_id for p in ranked] == ["prov_002", "prov_001"]

    def test_rating_descending_within_location_group(self):
        providers = [make_provider(1, rating=4.1), make_provider(2, rating=4.9)]
        ranked = rank_providers(providers, location="San Francisco")
        assert [p.rating for p in ranked] == [4.9, 4.1]

    def test_ties_keep_input_order(self):
        providers = [make_provider(i, rating=4.5) for i in (3, 1, 2)]
        ranked = rank_providers(providers, "Blue Cross Blue Shield", "San Francisco")
        assert [p.provider_id for p in ranked] == ["prov_003", "prov_001", "prov_002"]

    def test_limit(self):
        providers = [make_provider(i) for i in range(1, 8)]
        assert len(rank_providers(providers, limit=3)) == 3

    def test_no_filters_keeps_everyone(self):
        providers = [make_provider(i) for i in range(1, 4)]
        assert len(rank_providers(providers)) == 3

    def test_deterministic(self):
        providers = [make_provider(i, rating=4.0 + i / 10) for i in range(1, 6)]
        first = rank_providers(providers, "Blue Cross Blue Shield", "San Francisco")
        second = rank_providers(providers, "Blue Cross Blue Shield", "San Francisco")
        assert first == second


class TestStaticProviderDirectory:
    @pytest.mark.asyncio
    async def test_default_catalog_for_bcbs_in_san_francisco(self):
        directory = StaticProviderDirectory()
        ranked = await directory.recommend("Blue Cross Blue Shield", "San Francisco")
        assert [p.provider_id for p in ranked] == [
            "prov_001", "prov_006", "prov_004", "prov_005", "prov_002",
        ]

    @pytest.mark.asyncio
    async def test_max_results(self):
        directory = StaticProviderDirectory(max_results=2)
        assert len(await directory.recommend()) == 2

    def test_catalog_loads(self):
        assert len(StaticProviderDirectory().providers) == len(PROVIDER_CATALOG)

    @pytest.mark.asyncio
    async def test_from_json(self, tmp_path):
        path = tmp_path / "providers.json"
        path.write_text(json.dumps([PROVIDER_CATALOG[0]]))
        directory = StaticProviderDirectory.from_json(path)
        ranked = await directory.recommend("Aetna")
        assert [p.name for p in ranked] == ["Dr. Sarah Chen"]

    def test_from_json_missing_file(self, tmp_path):
        with pytest.raises(LookupFailure):
            StaticProviderDirectory.from_json(tmp_path / "nope.json")

    def test_from_json_bad_record(self, tmp_path):
        path = tmp_path / "providers.json"
        path.write_text(json.dumps([{"name": "No id"}]))
        with pytest.raises(LookupFailure):
            StaticProviderDirectory.from_json(path)
