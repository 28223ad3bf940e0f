from transcript2audio import cache as cache_module
from transcript2audio.cache import TranscriptCache, compute_transcript_hash
from transcript2audio.conversation import Conversation, Utterance

CONVERSATION = Conversation(
    (
        Utterance("Alice", "Hello, ¿qué tal?"),
        Utterance("Bob", "Fine: thanks."),
    )
)


def test_hash_is_deterministic_sha256_hex():
    key = compute_transcript_hash(b"Alice: hi\n")

    assert key == compute_transcript_hash(b"Alice: hi\n")
    assert len(key) == 64
    assert int(key, 16) >= 0


def test_hash_changes_with_any_byte():
    base = b"Alice: hi\nBob: hello\n"

    assert compute_transcript_hash(base) != compute_transcript_hash(base + b" ")
    assert compute_transcript_hash(base) != compute_transcript_hash(base.replace(b"hi", b"Hi"))


def test_round_trip(tmp_path):
    cache = TranscriptCache(tmp_path)
    key = compute_transcript_hash(b"transcript")

    cache.put(key, CONVERSATION)

    assert cache.get(key) == CONVERSATION


def test_round_trip_empty_conversation(tmp_path):
    cache = TranscriptCache(tmp_path)

    cache.put("ab" * 32, Conversation())

    assert cache.get("ab" * 32) == Conversation()


def test_unseen_key_is_a_miss(tmp_path):
    assert TranscriptCache(tmp_path).get(compute_transcript_hash(b"never stored")) is None


def test_corrupt_entry_is_a_miss(tmp_path):
    cache = TranscriptCache(tmp_path)
    key = compute_transcript_hash(b"transcript")
    cache.put(key, CONVERSATION)
    cache._entry_path(key).write_bytes(b"{not json")

    assert cache.get(key) is None


def test_wrong_shape_entry_is_a_miss(tmp_path):
    cache = TranscriptCache(tmp_path)
    key = compute_transcript_hash(b"transcript")
    entry = cache._entry_path(key)
    entry.parent.mkdir(parents=True)
    entry.write_text('{"interjections": [{"voice": 1}]}', encoding="utf-8")

    assert cache.get(key) is None


def test_put_failure_is_ignored(tmp_path):
    cache = TranscriptCache(tmp_path)
    key = compute_transcript_hash(b"transcript")
    # A regular file where the shard directory should be makes every write fail.
    (tmp_path / key[:2]).write_text("in the way")

    cache.put(key, CONVERSATION)

    assert cache.get(key) is None
    assert list(tmp_path.iterdir()) == [tmp_path / key[:2]]


def test_last_writer_wins(tmp_path):
    cache = TranscriptCache(tmp_path)
    key = compute_transcript_hash(b"transcript")
    replacement = Conversation((Utterance("Carol", "Me instead."),))

    cache.put(key, CONVERSATION)
    cache.put(key, replacement)

    assert cache.get(key) == replacement


def test_default_directory_is_namespaced(monkeypatch, tmp_path):
    monkeypatch.setattr(cache_module, "user_cache_dir", lambda app: str(tmp_path / app))

    cache = TranscriptCache()

    assert cache.cache_dir == tmp_path / "transcript2audio"
    assert cache.cache_dir.is_dir()


def test_deeply_nested_entry_is_a_miss(tmp_path):
    cache = TranscriptCache(tmp_path)
    key = compute_transcript_hash(b"transcript")
    entry = cache._entry_path(key)
    entry.parent.mkdir(parents=True)
    entry.write_text("[" * 200_000, encoding="utf-8")

    assert cache.get(key) is None
