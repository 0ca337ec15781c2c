"""
Tree Store Tests

Run with: python -m pytest canvasos/tests -v
"""

import random
import unittest

from canvasos.exceptions import (
    NotFoundError,
    DuplicateNameError,
    NotAFolderError,
    NotAFileError,
    InvalidOperandError,
    InvalidNameError,
    DepthLimitError,
)
from canvasos.filesystem import (
    MAX_DEPTH,
    FileNode,
    FolderNode,
    MemoryKeyValueStore,
    NodeType,
    PersistenceAdapter,
    TreeStore,
)


def make_store() -> TreeStore:
    """/Docs/a.txt, /Docs/Sub/, /Desktop/"""
    store = TreeStore()
    store.create_node('/', 'Docs', NodeType.FOLDER)
    store.create_node('/Docs', 'a.txt', NodeType.FILE)
    store.create_node('/Docs', 'Sub', NodeType.FOLDER)
    store.create_node('/', 'Desktop', NodeType.FOLDER)
    return store


class TestQueries(unittest.TestCase):
    """list / exists / get."""

    def setUp(self):
        self.store = make_store()

    def test_list_root_in_insertion_order(self):
        names = [node.name for node in self.store.list('/')]
        self.assertEqual(names, ['Docs', 'Desktop'])

    def test_list_folder(self):
        entries = self.store.list('/Docs')
        self.assertEqual([e.name for e in entries], ['a.txt', 'Sub'])
        self.assertTrue(entries[0].is_file)
        self.assertTrue(entries[1].is_folder)

    def test_list_missing_folder(self):
        with self.assertRaises(NotFoundError):
            self.store.list('/Nope')

    def test_list_file(self):
        with self.assertRaises(NotAFolderError):
            self.store.list('/Docs/a.txt')

    def test_exists(self):
        self.assertTrue(self.store.exists('/'))
        self.assertTrue(self.store.exists('/Docs'))
        self.assertTrue(self.store.exists('/Docs/a.txt'))
        self.assertTrue(self.store.exists('/Docs/Sub/'))
        self.assertFalse(self.store.exists('/Docs/b.txt'))
        self.assertFalse(self.store.exists('/Sub'))

    def test_exists_does_not_descend_through_files(self):
        self.assertFalse(self.store.exists('/Docs/a.txt/x'))

    def test_is_folder(self):
        self.assertTrue(self.store.is_folder('/'))
        self.assertTrue(self.store.is_folder('/Docs/Sub'))
        self.assertFalse(self.store.is_folder('/Docs/a.txt'))
        self.assertFalse(self.store.is_folder('/missing'))

    def test_paths_are_canonical(self):
        self.assertEqual(self.store.get('/Docs/Sub').path, '/Docs/Sub')
        self.assertEqual(self.store.get('/Docs/a.txt').path, '/Docs/a.txt')
        self.assertIsNone(self.store.get('/'))

    def test_walk_is_depth_first(self):
        paths = [node.path for node in self.store.walk()]
        self.assertEqual(paths, ['/Docs', '/Docs/a.txt', '/Docs/Sub', '/Desktop'])


class TestCreate(unittest.TestCase):
    """create_node."""

    def setUp(self):
        self.store = make_store()

    def test_returns_new_path_and_appends(self):
        path = self.store.create_node('/Docs', 'b.txt', NodeType.FILE)
        self.assertEqual(path, '/Docs/b.txt')
        self.assertEqual(self.store.list('/Docs')[-1].name, 'b.txt')
        self.assertEqual(self.store.read_content(path), '')

    def test_new_folder_is_empty(self):
        self.store.create_node('/Desktop', 'Projects', NodeType.FOLDER)
        self.assertEqual(self.store.list('/Desktop/Projects'), [])

    def test_duplicate_name_any_kind(self):
        cases = [
            ('/', 'Docs', NodeType.FOLDER),
            ('/', 'Docs', NodeType.FILE),
            ('/Docs', 'a.txt', NodeType.FILE),
            ('/Docs', 'a.txt', NodeType.FOLDER),
        ]
        for parent, name, node_type in cases:
            with self.subTest(parent=parent, name=name, node_type=node_type):
                with self.assertRaises(DuplicateNameError) as ctx:
                    self.store.create_node(parent, name, node_type)
                self.assertEqual(ctx.exception.name, name)

    def test_missing_parent(self):
        with self.assertRaises(NotFoundError):
            self.store.create_node('/Nope', 'x', NodeType.FILE)
        with self.assertRaises(NotFoundError):
            self.store.create_node('/Docs/a.txt/deeper', 'x', NodeType.FILE)

    def test_parent_is_file(self):
        with self.assertRaises(NotAFolderError):
            self.store.create_node('/Docs/a.txt', 'x', NodeType.FILE)

    def test_invalid_names(self):
        for name in ('', 'a/b', '.', '..'):
            with self.subTest(name=name):
                with self.assertRaises(InvalidNameError):
                    self.store.create_node('/', name, NodeType.FOLDER)

    def test_invalid_name_is_an_invalid_operand(self):
        with self.assertRaises(InvalidOperandError):
            self.store.create_node('/', '', NodeType.FILE)


class TestDelete(unittest.TestCase):
    """delete_node."""

    def setUp(self):
        self.store = make_store()

    def test_delete_file(self):
        self.store.delete_node('/Docs/a.txt')
        self.assertFalse(self.store.exists('/Docs/a.txt'))
        self.assertEqual([e.name for e in self.store.list('/Docs')], ['Sub'])

    def test_delete_folder_removes_subtree(self):
        self.store.create_node('/Docs/Sub', 'deep.txt', NodeType.FILE)
        descendants = ['/Docs/a.txt', '/Docs/Sub', '/Docs/Sub/deep.txt']

        self.store.delete_node('/Docs')

        self.assertFalse(self.store.exists('/Docs'))
        for path in descendants:
            with self.subTest(path=path):
                self.assertFalse(self.store.exists(path))
        self.assertEqual([e.name for e in self.store.list('/')], ['Desktop'])

    def test_delete_missing(self):
        with self.assertRaises(NotFoundError):
            self.store.delete_node('/Docs/missing')
        with self.assertRaises(NotFoundError):
            self.store.delete_node('/Nope/a.txt')
        with self.assertRaises(NotFoundError):
            self.store.delete_node('/Docs/a.txt/x')

    def test_delete_root_rejected(self):
        with self.assertRaises(InvalidOperandError):
            self.store.delete_node('/')

    def test_name_reusable_after_delete(self):
        self.store.delete_node('/Docs')
        self.store.create_node('/', 'Docs', NodeType.FILE)
        self.assertTrue(self.store.get('/Docs').is_file)


class TestWriteContent(unittest.TestCase):
    """write_content."""

    def setUp(self):
        self.store = make_store()

    def test_replaces_content_only(self):
        self.store.write_content('/Docs/a.txt', 'hello')
        node = self.store.get('/Docs/a.txt')
        self.assertEqual(node, FileNode(name='a.txt', path='/Docs/a.txt', content='hello'))
        self.assertEqual([e.name for e in self.store.list('/Docs')], ['a.txt', 'Sub'])

    def test_folder_target(self):
        with self.assertRaises(NotAFileError):
            self.store.write_content('/Docs/Sub', 'x')
        with self.assertRaises(NotAFileError):
            self.store.write_content('/', 'x')

    def test_missing_target(self):
        with self.assertRaises(NotFoundError):
            self.store.write_content('/Docs/b.txt', 'x')
        with self.assertRaises(NotFoundError):
            self.store.write_content('/Nope/b.txt', 'x')


class TestCopyOnWrite(unittest.TestCase):
    """Structural sharing and failure atomicity."""

    def setUp(self):
        self.store = make_store()

    def test_untouched_siblings_are_shared(self):
        before = self.store.snapshot()
        desktop = self.store.get('/Desktop')
        sub = self.store.get('/Docs/Sub')

        self.store.write_content('/Docs/a.txt', 'changed')

        self.assertIs(self.store.get('/Desktop'), desktop)
        self.assertIs(self.store.get('/Docs/Sub'), sub)
        self.assertIsNot(self.store.get('/Docs'), before[0])

    def test_old_snapshot_is_unchanged(self):
        before = self.store.snapshot()
        self.store.create_node('/Docs/Sub', 'new.txt', NodeType.FILE)
        self.store.delete_node('/Desktop')

        self.assertEqual([n.name for n in before], ['Docs', 'Desktop'])
        self.assertEqual(before[0].child('Sub').children, ())

    def test_failed_operations_leave_tree_as_it_was(self):
        before = self.store.snapshot()
        failing = [
            lambda: self.store.create_node('/', 'Docs', NodeType.FILE),
            lambda: self.store.create_node('/Docs/a.txt', 'x', NodeType.FILE),
            lambda: self.store.delete_node('/Docs/missing'),
            lambda: self.store.write_content('/Docs/Sub', 'x'),
        ]
        for operation in failing:
            with self.assertRaises(Exception):
                operation()
            self.assertIs(self.store.snapshot(), before)

    def test_nodes_are_frozen(self):
        node = self.store.get('/Docs/a.txt')
        with self.assertRaises(AttributeError):
            node.content = 'mutated'


class TestExistsProperty(unittest.TestCase):
    """exists() agrees with a model of reachable paths under random edits."""

    NAMES = ['a', 'b', 'c', 'd.txt']

    def test_random_create_delete_sequences(self):
        for seed in range(20):
            with self.subTest(seed=seed):
                self._run_sequence(random.Random(seed))

    def _run_sequence(self, rng: random.Random) -> None:
        store = TreeStore()
        folders = {'/'}
        files: set[str] = set()

        def child_path(parent: str, name: str) -> str:
            return f"/{name}" if parent == '/' else f"{parent}/{name}"

        for _ in range(60):
            existing = sorted((folders | files) - {'/'})
            if existing and rng.random() < 0.3:
                target = rng.choice(existing)
                store.delete_node(target)
                prefix = target + '/'
                folders = {p for p in folders if p != target and not p.startswith(prefix)}
                files = {p for p in files if p != target and not p.startswith(prefix)}
                continue

            parent = rng.choice(sorted(folders))
            name = rng.choice(self.NAMES)
            node_type = rng.choice([NodeType.FILE, NodeType.FOLDER])
            path = child_path(parent, name)

            if path in folders or path in files:
                with self.assertRaises(DuplicateNameError):
                    store.create_node(parent, name, node_type)
                continue

            self.assertEqual(store.create_node(parent, name, node_type), path)
            (folders if node_type is NodeType.FOLDER else files).add(path)

        reachable = (folders | files) - {'/'}
        self.assertEqual({node.path for node in store.walk()}, reachable)
        for path in reachable:
            self.assertTrue(store.exists(path))
        for parent in sorted(folders):
            for name in self.NAMES:
                path = child_path(parent, name)
                self.assertEqual(store.exists(path), path in reachable)


class TestChangeTracking(unittest.TestCase):
    """subscribe, write-through and reload."""

    def test_listeners_see_every_change(self):
        store = TreeStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)

        store.create_node('/', 'Docs', NodeType.FOLDER)
        store.create_node('/Docs', 'a.txt', NodeType.FILE)
        self.assertEqual(len(seen), 2)
        self.assertIs(seen[-1], store.snapshot())

        unsubscribe()
        store.delete_node('/Docs')
        self.assertEqual(len(seen), 2)

    def test_failed_change_is_not_announced(self):
        store = TreeStore()
        seen = []
        store.subscribe(seen.append)
        with self.assertRaises(NotFoundError):
            store.delete_node('/missing')
        self.assertEqual(seen, [])

    def test_changes_are_written_through(self):
        kv = MemoryKeyValueStore()
        store = TreeStore.from_persistence(PersistenceAdapter(kv))

        store.create_node('/Desktop', 'todo.txt', NodeType.FILE)
        store.write_content('/Desktop/todo.txt', 'buy milk')

        reloaded = PersistenceAdapter(kv).load()
        desktop = [node for node in reloaded if node.name == 'Desktop'][0]
        self.assertEqual(
            desktop,
            FolderNode(
                name='Desktop',
                path='/Desktop',
                children=(FileNode('todo.txt', '/Desktop/todo.txt', 'buy milk'),),
            ),
        )

    def test_separate_stores_hold_separate_snapshots(self):
        kv = MemoryKeyValueStore()
        first = TreeStore.from_persistence(PersistenceAdapter(kv))
        second = TreeStore.from_persistence(PersistenceAdapter(kv))

        first.create_node('/', 'Music', NodeType.FOLDER)
        self.assertFalse(second.exists('/Music'))

        notified = []
        second.subscribe(notified.append)
        second.reload()
        self.assertTrue(second.exists('/Music'))
        self.assertEqual(len(notified), 1)

    def test_reload_without_persistence_is_a_no_op(self):
        store = make_store()
        before = store.snapshot()
        store.reload()
        self.assertIs(store.snapshot(), before)

    def test_failing_listener_does_not_undo_change(self):
        store = TreeStore()
        seen = []

        def broken(tree):
            raise RuntimeError('view crashed')

        store.subscribe(broken)
        store.subscribe(seen.append)

        with self.assertLogs('canvasos.tree_store', level='ERROR') as logs:
            path = store.create_node('/', 'Docs', NodeType.FOLDER)

        self.assertEqual(path, '/Docs')
        self.assertTrue(store.exists('/Docs'))
        self.assertEqual(len(seen), 1)
        self.assertIn('Change listener failed', logs.output[0])


class TestDepthLimit(unittest.TestCase):
    """Nesting is bounded by MAX_DEPTH."""

    def build_chain(self, store: TreeStore, depth: int) -> str:
        parent = '/'
        for level in range(depth):
            parent = store.create_node(parent, f'd{level}', NodeType.FOLDER)
        return parent

    def test_deepest_allowed_node(self):
        store = TreeStore()
        deepest = self.build_chain(store, MAX_DEPTH)
        self.assertTrue(store.is_folder(deepest))
        self.assertEqual(len(list(store.walk())), MAX_DEPTH)

    def test_one_level_deeper_is_rejected(self):
        store = TreeStore()
        deepest = self.build_chain(store, MAX_DEPTH)
        before = store.snapshot()

        for node_type in (NodeType.FILE, NodeType.FOLDER):
            with self.subTest(node_type=node_type):
                with self.assertRaises(DepthLimitError) as ctx:
                    store.create_node(deepest, 'x', node_type)
                self.assertIsInstance(ctx.exception, InvalidOperandError)
                self.assertEqual(ctx.exception.limit, MAX_DEPTH)
                self.assertIs(store.snapshot(), before)

    def test_deep_chain_survives_save_and_load(self):
        kv = MemoryKeyValueStore()
        store = TreeStore.from_persistence(PersistenceAdapter(kv))
        deepest = self.build_chain(store, MAX_DEPTH - 1)
        store.write_content(
            store.create_node(deepest, 'leaf.txt', NodeType.FILE), 'bottom'
        )

        reloaded = TreeStore.from_persistence(PersistenceAdapter(kv))
        self.assertEqual(reloaded.snapshot(), store.snapshot())
        self.assertEqual(reloaded.read_content(f'{deepest}/leaf.txt'), 'bottom')


if __name__ == '__main__':
    unittest.main()
