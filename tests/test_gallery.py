import unittest

from face_attendance.core.exceptions import (
    DuplicateIdentityError,
    IdentityNotFoundError,
    InvalidEmbeddingError,
)
from face_attendance.infrastructure.memory import InMemoryDatabase
from face_attendance.infrastructure.store import create_memory_store
from face_attendance.services.gallery import Gallery
from tests.helpers import entry


class GalleryTests(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.db = InMemoryDatabase()
        self.store = create_memory_store(self.db)
        self.gallery = Gallery(self.store.identities)

    async def test_add_and_get(self):
        embedding = [0.123456789, -0.987654321, 0.5]

        created = await self.gallery.add("U1", "Alice", embedding, "alice.jpg")
        fetched = await self.gallery.get("U1")

        self.assertEqual(created.identity_id, "U1")
        self.assertIsNotNone(fetched.created_at)
        self.assertEqual(fetched.display_name, "Alice")
        self.assertEqual(fetched.image_ref, "alice.jpg")
        for stored, original in zip(fetched.embedding, embedding):
            self.assertAlmostEqual(stored, original, delta=1e-6)

    async def test_duplicate_leaves_gallery_unchanged(self):
        await self.gallery.add("U1", "Alice", [0.1, 0.2, 0.3], "alice.jpg")

        with self.assertRaises(DuplicateIdentityError) as ctx:
            await self.gallery.add("U1", "Mallory", [0.9, 0.9, 0.9], "mallory.jpg")

        self.assertEqual(ctx.exception.status_code, 409)
        entries = await self.gallery.list()
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].display_name, "Alice")
        self.assertEqual(entries[0].embedding, (0.1, 0.2, 0.3))

    async def test_first_entry_fixes_dimension(self):
        self.assertIsNone(await self.gallery.dimension())
        await self.gallery.add("U1", "Alice", [0.1, 0.2, 0.3], "a.jpg")

        with self.assertRaises(InvalidEmbeddingError):
            await self.gallery.add("U2", "Bob", [0.1, 0.2, 0.3, 0.4], "b.jpg")

        self.assertEqual(await self.gallery.dimension(), 3)
        self.assertFalse(await self.gallery.exists("U2"))

    async def test_configured_dimension(self):
        gallery = Gallery(self.store.identities, embedding_dim=4)

        with self.assertRaises(InvalidEmbeddingError):
            await gallery.add("U1", "Alice", [0.1, 0.2, 0.3], "a.jpg")
        await gallery.add("U1", "Alice", [0.1, 0.2, 0.3, 0.4], "a.jpg")

        self.assertEqual(await gallery.dimension(), 4)

    async def test_invalid_embeddings(self):
        for embedding in ([], [0.1, float("nan")], [float("inf"), 0.0], [[0.1], [0.2]]):
            with self.subTest(embedding=embedding):
                with self.assertRaises(InvalidEmbeddingError) as ctx:
                    await self.gallery.add("U1", "Alice", embedding, "a.jpg")
                self.assertEqual(ctx.exception.code, "INVALID_EMBEDDING")
        self.assertEqual(await self.gallery.list(), [])

    async def test_get_unknown(self):
        with self.assertRaises(IdentityNotFoundError) as ctx:
            await self.gallery.get("nobody")
        self.assertEqual(ctx.exception.status_code, 404)

    async def test_snapshot_in_enrollment_order(self):
        for identity_id in ("A", "B", "C"):
            await self.gallery.add(identity_id, identity_id, [0.0, 1.0], f"{identity_id}.jpg")

        snapshot = await self.gallery.snapshot()

        self.assertEqual([e.identity_id for e in snapshot], ["A", "B", "C"])
        self.assertEqual(snapshot.dimension, 2)
        self.assertEqual(snapshot.matrix.shape, (3, 2))

    async def test_snapshot_is_detached_from_later_writes(self):
        await self.gallery.add("A", "A", [0.0, 1.0], "a.jpg")
        snapshot = await self.gallery.snapshot()

        await self.gallery.add("B", "B", [1.0, 0.0], "b.jpg")

        self.assertEqual(len(snapshot), 1)
        self.assertFalse(snapshot.matrix.flags.writeable)

    async def test_snapshot_skips_entries_of_other_dimension(self):
        await self.gallery.add("A", "A", [0.0, 1.0], "a.jpg")
        stray = entry("Z", [0.0, 1.0, 2.0])
        self.db.identities["Z"] = stray.model_copy(update={"created_at": (await self.gallery.get("A")).created_at})

        snapshot = await self.gallery.snapshot()

        self.assertEqual([e.identity_id for e in snapshot], ["A"])

    async def test_remove_notifies_listeners(self):
        removed = []

        async def listener(entry):
            removed.append(entry.identity_id)

        self.gallery.on_remove(listener)
        await self.gallery.add("U1", "Alice", [0.1, 0.2], "a.jpg")

        result = await self.gallery.remove("U1")

        self.assertEqual(result.identity_id, "U1")
        self.assertEqual(removed, ["U1"])
        self.assertFalse(await self.gallery.exists("U1"))

    async def test_failed_listener_leaves_identity_in_place(self):
        failures = [RuntimeError("cascade failed")]
        seen = []

        async def listener(entry):
            seen.append(await self.gallery.exists(entry.identity_id))
            if failures:
                raise failures.pop()

        self.gallery.on_remove(listener)
        await self.gallery.add("U1", "Alice", [0.1, 0.2], "a.jpg")

        with self.assertRaises(RuntimeError):
            await self.gallery.remove("U1")
        self.assertTrue(await self.gallery.exists("U1"))

        await self.gallery.remove("U1")

        self.assertEqual(seen, [True, True])
        self.assertFalse(await self.gallery.exists("U1"))

    async def test_remove_unknown(self):
        calls = []

        async def listener(entry):
            calls.append(entry)

        self.gallery.on_remove(listener)
        with self.assertRaises(IdentityNotFoundError):
            await self.gallery.remove("nobody")
        self.assertEqual(calls, [])

    async def test_id_can_be_reused_after_remove(self):
        await self.gallery.add("U1", "Alice", [0.1, 0.2], "a.jpg")
        await self.gallery.remove("U1")

        await self.gallery.add("U1", "Alice again", [0.3, 0.4], "a2.jpg")

        self.assertEqual((await self.gallery.get("U1")).display_name, "Alice again")
