from flask import jsonify, request

from potion_client import Resource, BelongsTo, HasOne, HasMany, Collection
from potion_client.exceptions import AssociationUnknownError, PathError
from tests import BaseTestCase


class AssociationsTestCase(BaseTestCase):

    def setUp(self):
        super(AssociationsTestCase, self).setUp()

        @self.app.route('/users/<int:id>')
        def read_user(id):
            if id == 1:
                return jsonify(id=1, fullname='Tobias Fünke', organization_id=2,
                               organization={'id': 2, 'name': 'Bluth Company'},
                               comments=[{'id': 3, 'body': 'I just blue myself', 'user_id': 1}])
            if id == 4:
                return jsonify(id=4, fullname='Buster Bluth', organization=None, comments=[], role=None)
            if id == 5:
                return jsonify(id=5, fullname='Gob Bluth', organization={}, organization_id=3)
            return jsonify(id=id, fullname='Lindsay Fünke', organization_id=2)

        @self.app.route('/users/<int:id>/comments')
        def user_comments(id):
            comments = [{'id': 5, 'body': 'Say goodbye to these', 'user_id': id},
                        {'id': 6, 'body': 'There is always money in the banana stand', 'user_id': id}]
            if request.args.get('approved'):
                comments = comments[:1]
            return jsonify(comments)

        @self.app.route('/comments', methods=['POST'])
        def create_comment():
            return jsonify(dict(request.get_json(), id=7)), 201

        @self.app.route('/users/<int:user_id>/comments/<int:id>')
        def user_comment(user_id, id):
            return jsonify(id=id, body='Say goodbye to these', user_id=user_id)

        @self.app.route('/users/<int:id>/role')
        def user_role(id):
            return jsonify(id=8, name='Analyst')

        @self.app.route('/organizations/<int:id>')
        def read_organization(id):
            return jsonify(id=id, name='Bluth Company')

        class User(Resource):
            organization = BelongsTo()
            comments = HasMany()
            role = HasOne()

            class Meta:
                api = self.api

        class Comment(Resource):
            user = BelongsTo()

            class Meta:
                api = self.api

        class Organization(Resource):
            class Meta:
                api = self.api

        class Role(Resource):
            class Meta:
                api = self.api

        self.User = User
        self.Comment = Comment
        self.Organization = Organization
        self.Role = Role

    def test_declarations(self):
        association = self.User.associations['comments']
        self.assertEqual('has_many', association.kind)
        self.assertEqual('comments', association.data_key)
        self.assertEqual('/comments', association.path)
        self.assertIs(self.Comment, association.target)

        association = self.User.associations['organization']
        self.assertEqual('belongs_to', association.kind)
        self.assertEqual('organization_id', association.foreign_key)
        self.assertIs(self.Organization, association.target)

        self.assertTrue(self.User.has_association('role'))
        self.assertFalse(self.User.has_association('friends'))

    def test_subclass_associations(self):
        class Admin(self.User):
            friends = HasMany('User')

        self.assertIsNot(self.User.associations, Admin.associations)
        self.assertEqual(['comments', 'friends', 'organization', 'role'], sorted(Admin.associations))
        self.assertEqual(['comments', 'organization', 'role'], sorted(self.User.associations))

        Admin.add_association('manager', BelongsTo('User'))
        self.assertIn('manager', Admin.associations)
        self.assertNotIn('manager', self.User.associations)

    def test_embedded_associations(self):
        user = self.User.find(1)

        self.assertEqual('Bluth Company', user.organization.name)
        self.assertIsInstance(user.organization, self.Organization)
        self.assertEqual(['I just blue myself'], [comment.body for comment in user.comments])
        self.assertIsInstance(user.get_attribute('comments'), Collection)
        self.assertEqual(1, len(user.comments))
        self.assertRequests(['GET /users/1'])

    def test_known_absent(self):
        user = self.User.find(4)

        self.assertIsNone(user.organization)
        self.assertEqual(0, len(user.comments))
        self.assertEqual([], list(user.comments))
        self.assertIsNone(user.role)
        self.assertRequests(['GET /users/4'])

    def test_known_absent_empty_object(self):
        user = self.User.find(5)

        self.assertIsNone(user.organization)
        self.assertIsNone(user.get_attribute('organization'))
        self.assertRequests(['GET /users/5'])

    def test_has_many_fetch(self):
        user = self.User.find(2)
        comments = user.comments

        self.assertEqual(2, len(comments))
        self.assertEqual('Say goodbye to these', comments[0].body)
        self.assertEqual(2, comments.count())
        self.assertEqual('There is always money in the banana stand', comments.last.body)
        self.assertRequests(['GET /users/2', 'GET /users/2/comments'])

    def test_has_many_with_params(self):
        user = self.User.find(2)

        approved = user.association('comments').where(approved=1)
        self.assertEqual(1, len(approved))
        self.assertEqual(1, len(user.comments.where(approved=1)))
        self.assertRequests(['GET /users/2', 'GET /users/2/comments?approved=1', 'GET /users/2/comments?approved=1'])

        self.assertFalse(user.has_attribute('comments'))
        self.assertEqual(2, len(user.comments))
        self.assertEqual(4, len(self.requests))

    def test_has_many_empty_list_param(self):
        user = self.User.find(2)
        self.assertEqual([], list(user.comments.where(ids=[])))
        self.assertRequests(['GET /users/2'])

    def test_has_many_inverse(self):
        user = self.User.find(2)
        comment = user.comments.first

        self.assertIs(user, comment.user)
        self.assertFalse(comment.has_attribute('user'))
        self.assertRequests(['GET /users/2', 'GET /users/2/comments'])

        self.assertEqual({'id': 5, 'body': 'Say goodbye to these', 'user_id': 2}, comment.to_params())
        self.assertIn('Comment', repr(comment))
        self.assertEqual(hash(comment), hash(comment))

    def test_has_many_find(self):
        user = self.User.find(2)
        comment = user.comments.find(5)

        self.assertEqual('Say goodbye to these', comment.body)
        self.assertIsNone(user.comments.find(None))
        self.assertRequests(['GET /users/2', 'GET /users/2/comments/5'])

    def test_has_many_build_and_create(self):
        user = self.User.find(2)

        comment = user.comments.build(body='Hey, brother')
        self.assertTrue(comment.is_new())
        self.assertEqual(2, comment.user_id)

        comment = user.comments.create(body='Hey, brother')
        self.assertEqual(7, comment.id)
        self.assertEqual({'body': 'Hey, brother', 'user_id': 2}, self.request_json(self.last_request))
        self.assertEqual([comment], list(user.comments))
        self.assertRequests(['GET /users/2', 'POST /comments'])

    def test_new_parent(self):
        user = self.User(fullname='Buster Bluth')

        self.assertEqual(0, len(user.comments))
        self.assertIsNone(user.role)
        self.assertIsNone(user.organization)
        self.assertRequests([])

    def test_belongs_to_fetch(self):
        user = self.User.find(2)

        self.assertEqual('Bluth Company', user.organization.name)
        self.assertEqual('Bluth Company', user.organization.name)
        self.assertRequests(['GET /users/2', 'GET /organizations/2'])

    def test_belongs_to_without_foreign_key(self):
        comment = self.Comment(body='Orphan')
        self.assertIsNone(comment.user)
        self.assertRequests([])

    def test_belongs_to_with_params_without_foreign_key(self):
        user = self.User(id=6, organization={'id': 2, 'name': 'Bluth Company'})

        self.assertIsNone(user.association('organization').where(active=1).fetch())
        self.assertRequests([])

    def test_belongs_to_assignment(self):
        comment = self.Comment(body='Hey, brother')
        user = self.User(id=9, fullname='Buster Bluth')

        comment.user = user
        self.assertIs(user, comment.user)
        self.assertEqual({'body': (None, 'Hey, brother'), 'user': (None, user)}, comment.changes)

        comment.user = {'id': 10, 'fullname': 'Gob Bluth'}
        self.assertIsInstance(comment.user, self.User)
        self.assertEqual('Gob Bluth', comment.user.fullname)

    def test_has_one_fetch(self):
        user = self.User.find(2)

        self.assertEqual('Analyst', user.role.name)
        self.assertIsInstance(user.role, self.Role)
        self.assertRequests(['GET /users/2', 'GET /users/2/role'])

    def test_path_error(self):
        class Comment(Resource):
            class Meta:
                api = self.api
                collection_path = '/users/:user_id/comments'

        class Post(Resource):
            comments = HasMany(Comment)
            comment = BelongsTo(Comment, foreign_key='comment_id')

            class Meta:
                api = self.api

        post = Post(id=1, comment_id=3)
        self.assertIsNone(post.comment)
        self.assertRequests([])

        with self.assertRaises(PathError):
            post.association('comment').where(approved=1).fetch()

    def test_unknown_association(self):
        with self.assertRaises(AssociationUnknownError) as cx:
            self.User(id=1).association('friends')
        self.assertEqual('Unknown association name "friends" on User', str(cx.exception))

    def test_reload(self):
        user = self.User.find(2)
        self.assertEqual(2, len(user.comments))

        self.assertEqual(2, len(user.association('comments').reload()))
        self.assertRequests(['GET /users/2', 'GET /users/2/comments', 'GET /users/2/comments'])

    def test_to_params_embeds_associations(self):
        user = self.User.find(1)
        self.assertEqual({
            'id': 1,
            'fullname': 'Tobias Fünke',
            'organization_id': 2,
            'organization': {'id': 2, 'name': 'Bluth Company'},
            'comments': [{'id': 3, 'body': 'I just blue myself', 'user_id': 1}]
        }, user.to_params())

    def test_to_dict(self):
        user = self.User.find(1)
        self.assertEqual({'id': 2, 'name': 'Bluth Company'}, user.to_dict()['organization'])
        self.assertEqual([{'id': 3, 'body': 'I just blue myself', 'user_id': 1}], user.to_dict()['comments'])

    def test_custom_options(self):
        @self.app.route('/accounts/<int:id>')
        def read_account(id):
            return jsonify(id=id, company={'id': 2, 'name': 'Bluth Company'})

        @self.app.route('/accounts/<int:id>/notes')
        def account_notes(id):
            return jsonify([{'id': 1, 'text': 'Never nude'}])

        class Account(Resource):
            business = BelongsTo('Organization', data_key='company')
            memos = HasMany('Comment', path='/notes', inverse_of='account')

            class Meta:
                api = self.api

        account = Account.find(1)
        self.assertEqual('Bluth Company', account.business.name)
        self.assertFalse(account.has_attribute('company'))

        memo = account.memos.first
        self.assertIsInstance(memo, self.Comment)
        self.assertEqual('Never nude', memo.text)
        self.assertIs(account, memo.account)
