"""Test special token registry, decode policies and id introspection."""

import pytest

from tekkentok.encode_decode import Tokenizer
from tekkentok.errors import SpecialTokenEncountered, UnknownSpecialToken
from tekkentok.special import CANONICAL_SPECIAL_TOKENS, SpecialTokenPolicy, SpecialTokenRegistry


def test_canonical_positions() -> None:
    registry = SpecialTokenRegistry(num_active=len(CANONICAL_SPECIAL_TOKENS))
    assert registry.unk_id == 0
    assert registry.bos_id == 1
    assert registry.eos_id == 2
    assert registry.pad_id == 11
    assert registry.id_of("[INST]") == 3
    assert registry.id_of("[TOOL_CONTENT]") == 19


def test_role_ids_on_tokenizer(example_tokenizer: Tokenizer) -> None:
    assert example_tokenizer.unk_id() == 0
    assert example_tokenizer.bos_id() == 1
    assert example_tokenizer.eos_id() == 2
    assert example_tokenizer.pad_id() == 11


def test_unknown_special_token_name(example_tokenizer: Tokenizer) -> None:
    assert example_tokenizer.get_special_token_id("[SYSTEM_PROMPT]") == 17
    with pytest.raises(UnknownSpecialToken) as excinfo:
        example_tokenizer.get_special_token_id("<mask>")
    assert excinfo.value.name == "<mask>"


def test_injected_names() -> None:
    registry = SpecialTokenRegistry(num_active=2, names=["<s>", "</s>", "<unk>", "<pad>"])
    assert (registry.bos_id, registry.eos_id, registry.unk_id, registry.pad_id) == (0, 1, 2, 3)
    # names past the active count still resolve by name
    assert registry.is_special(1)
    assert not registry.is_special(2)


def test_injected_names_must_cover_roles() -> None:
    with pytest.raises(UnknownSpecialToken):
        SpecialTokenRegistry(num_active=3, names=["<unk>", "<s>", "</s>"])


def test_negative_active_count_rejected() -> None:
    with pytest.raises(ValueError):
        SpecialTokenRegistry(num_active=-1)


@pytest.mark.parametrize("token_id", range(-2, 12))
def test_is_special_token_range(example_tokenizer: Tokenizer, token_id: int) -> None:
    assert example_tokenizer.is_special_token(token_id) is (token_id < 5)


class TestDecodePolicy:
    ids = [1, 65, 2]

    def test_ignore(self, example_tokenizer: Tokenizer) -> None:
        # id 65 is rank 60 with five special tokens
        assert example_tokenizer.decode(self.ids) == "<"
        assert example_tokenizer.decode(self.ids, SpecialTokenPolicy.IGNORE) == "<"

    def test_keep(self, example_tokenizer: Tokenizer) -> None:
        assert example_tokenizer.decode(self.ids, SpecialTokenPolicy.KEEP) == "<s><</s>"
        assert example_tokenizer.to_string(self.ids) == "<s><</s>"

    def test_raise(self, example_tokenizer: Tokenizer) -> None:
        with pytest.raises(SpecialTokenEncountered) as excinfo:
            example_tokenizer.decode(self.ids, SpecialTokenPolicy.RAISE)
        assert excinfo.value.token_id == 1

    def test_policy_by_name(self, example_tokenizer: Tokenizer) -> None:
        assert example_tokenizer.decode(self.ids, "keep") == "<s><</s>"
        assert example_tokenizer.decode(self.ids, "IGNORE") == "<"
        with pytest.raises(SpecialTokenEncountered):
            example_tokenizer.decode(self.ids, "raise")

    def test_unknown_policy(self, example_tokenizer: Tokenizer) -> None:
        with pytest.raises(ValueError):
            example_tokenizer.decode(self.ids, "drop")

    def test_decode_batch_uses_policy(self, example_tokenizer: Tokenizer) -> None:
        assert example_tokenizer.decode_batch([self.ids, [66]], "keep") == ["<s><</s>", "="]


def test_keep_uses_placeholder_for_unnamed_slots(make_tokenizer) -> None:
    tokenizer = make_tokenizer(num_special_tokens=25)
    assert tokenizer.to_string([22, 3]) == "<SPECIAL_22>[INST]"
    assert tokenizer.to_string([-1]) == "<SPECIAL_-1>"


def test_id_to_piece(example_tokenizer: Tokenizer) -> None:
    assert example_tokenizer.id_to_piece(1) == b"<s>"
    assert example_tokenizer.id_to_piece(256 + 5) == b"th"
    assert example_tokenizer.id_to_piece(ord("a") + 5) == b"a"
    # rank 1000 is unassigned: raw byte fallback
    assert example_tokenizer.id_to_piece(1000 + 5) == bytes([1000 & 0xFF])


def test_is_byte(example_tokenizer: Tokenizer) -> None:
    assert not example_tokenizer.is_byte(1)
    assert example_tokenizer.is_byte(5)
    assert example_tokenizer.is_byte(255 + 5)
    assert not example_tokenizer.is_byte(256 + 5)
