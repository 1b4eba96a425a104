from unittest import TestCase

from potion_client.attributes import AttributeStore


class AttributeStoreTestCase(TestCase):

    def test_absent_and_none_are_distinct(self):
        store = AttributeStore({'organization': None})
        self.assertTrue(store.has('organization'))
        self.assertIsNone(store.get('organization'))
        self.assertFalse(store.has('comments'))
        self.assertEqual('default', store.get('comments', 'default'))

    def test_set_tracks_changes(self):
        store = AttributeStore({'name': 'Tobias'})
        store.set('name', 'Lindsay')
        store.set('email', 'lindsay@example.com')

        self.assertEqual({
            'name': ('Tobias', 'Lindsay'),
            'email': (None, 'lindsay@example.com')
        }, store.changes)
        self.assertTrue(store.is_changed('name'))

    def test_set_same_value_is_no_change(self):
        store = AttributeStore({'name': 'Tobias'})
        store.set('name', 'Tobias')
        self.assertEqual({}, store.changes)

    def test_revert_clears_change(self):
        store = AttributeStore({'name': 'Tobias'})
        store.set('name', 'Lindsay')
        store.set('name', 'Maeby')
        self.assertEqual({'name': ('Tobias', 'Maeby')}, store.changes)

        store.set('name', 'Tobias')
        self.assertEqual({}, store.changes)
        self.assertEqual([], store.changed)

    def test_write_is_untracked(self):
        store = AttributeStore()
        store.write('id', 1)
        store.update({'name': 'Tobias'})
        self.assertEqual({}, store.changes)
        self.assertEqual({'id': 1, 'name': 'Tobias'}, store.as_dict())

    def test_apply_changes(self):
        store = AttributeStore({'name': 'Tobias'})
        store.set('name', 'Lindsay')
        store.apply_changes()

        self.assertEqual({}, store.changes)
        self.assertEqual({'name': ('Tobias', 'Lindsay')}, store.previous_changes)

    def test_clear_changes(self):
        store = AttributeStore()
        store.set('name', 'Tobias')
        store.clear_changes()
        self.assertEqual({}, store.changes)
        self.assertEqual({}, store.previous_changes)

    def test_pop(self):
        store = AttributeStore()
        store.set('name', 'Tobias')
        self.assertEqual('Tobias', store.pop('name'))
        self.assertFalse(store.has('name'))
        self.assertEqual({}, store.changes)

    def test_equality_and_freeze(self):
        self.assertEqual(AttributeStore({'tags': ['a', 'b']}), AttributeStore({'tags': ['a', 'b']}))
        self.assertNotEqual(AttributeStore({'tags': ['a']}), AttributeStore({'tags': ['b']}))
        self.assertEqual(hash(AttributeStore({'meta': {'x': [1]}}).freeze()),
                         hash(AttributeStore({'meta': {'x': [1]}}).freeze()))
