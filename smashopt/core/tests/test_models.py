"""Tests for the shared data models."""

import pytest

from smashopt.core.models import (
    EnvironmentInfo,
    Optimization,
    OptimizationStatus,
    ProfileIdentity,
)


class TestProfileIdentity:
    def test_nand_storage_id_puts_second_word_first(self) -> None:
        p = ProfileIdentity.from_words("Mario", 1, 2)
        assert p.nand_storage_id() == "00000000000000020000000000000001"

    def test_nand_storage_id_is_uppercase_hex(self) -> None:
        p = ProfileIdentity.from_words("Link", 0xABCDEF, 0x1)
        assert p.nand_storage_id() == "0000000000000001" + "0000000000ABCDEF"

    def test_arc_storage_ids_are_decimal(self) -> None:
        p = ProfileIdentity.from_words("Mario", 1, 2)
        assert p.arc_storage_ids() == ("1", "2")

    def test_large_words_survive(self) -> None:
        big = 0xFFFF_FFFF_FFFF_FFFF
        p = ProfileIdentity.from_words("Kirby", big, big - 1)
        assert p.uuid_words == (big, big - 1)
        assert p.uuid == (str(big), str(big - 1))

    def test_equality_needs_name_and_uuid(self) -> None:
        a = ProfileIdentity.from_words("Mario", 1, 2)
        assert a == ProfileIdentity(name="Mario", uuid=("1", "2"))
        assert a != ProfileIdentity.from_words("Luigi", 1, 2)
        assert a != ProfileIdentity.from_words("Mario", 2, 1)

    def test_uuid_list_is_normalized_to_tuple(self) -> None:
        p = ProfileIdentity(name="Mario", uuid=["1", "2"])
        assert p.uuid == ("1", "2")
        assert hash(p) == hash(ProfileIdentity.from_words("Mario", 1, 2))

    @pytest.mark.parametrize("uuid", [("0", "0"), ("1",), ("x", "1"), ("-1", "2"),
                                      (str(2 ** 64), "1")])
    def test_rejects_bad_uuid(self, uuid) -> None:
        with pytest.raises(ValueError):
            ProfileIdentity(name="Bad", uuid=uuid)

    def test_json_shape(self) -> None:
        p = ProfileIdentity.from_words("Mario", 1, 2)
        assert p.to_json() == {"name": "Mario", "uuid": ["1", "2"]}
        assert ProfileIdentity.from_json(p.to_json()) == p

    def test_from_json_rejects_non_list_uuid(self) -> None:
        with pytest.raises(ValueError):
            ProfileIdentity.from_json({"name": "Mario", "uuid": "12"})


class TestOptimizationStatus:
    def test_defaults_are_false(self) -> None:
        status = OptimizationStatus()
        assert not any(status.is_done(o) for o in Optimization)

    def test_mark_only_touches_one_flag(self) -> None:
        status = OptimizationStatus()
        status.mark(Optimization.MODS)
        assert status == OptimizationStatus(mods_optimized=True)

        status.mark(Optimization.MODS)
        assert status == OptimizationStatus(mods_optimized=True)


class TestEnvironmentInfo:
    def test_empty_is_unresolved(self) -> None:
        env = EnvironmentInfo.empty()
        assert not env.is_resolved
        assert env.nand_dir is None and env.sdmc_dir is None
