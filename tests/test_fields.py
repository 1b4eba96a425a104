from datetime import datetime, date, timedelta, timezone
from unittest import TestCase
from uuid import uuid4

from potion_client import fields
from potion_client.exceptions import ValidationError


class FieldsTestCase(TestCase):

    def test_raw_schema(self):
        foo = fields.Raw({"type": "string"})

        self.assertEqual({"type": "string"}, foo.response)
        self.assertEqual({"type": "string"}, foo.request)

        # NOTE format is (response, request)
        foo_rw = fields.Raw((
            {"type": "string"},
            {"type": "number"}
        ))
        self.assertEqual({"type": "string"}, foo_rw.response)
        self.assertEqual({"type": "number"}, foo_rw.request)

    def test_raw_nullable(self):
        foo = fields.Raw({"type": "string"}, nullable=True)
        self.assertEqual({"type": ["string", "null"]}, foo.response)

        foo_enum = fields.Raw({"type": "string", "enum": ["a", "b"]}, nullable=True)
        self.assertEqual({"type": ["string", "null"], "enum": ["a", "b", None]}, foo_enum.response)

        foo_ref = fields.Raw({"$ref": "#/some/other/schema"}, nullable=True)
        self.assertEqual({"anyOf": [{"$ref": "#/some/other/schema"}, {"type": "null"}]}, foo_ref.response)

    def test_raw_io(self):
        self.assertEqual("r", fields.Raw({"type": "number"}, io="r").io)
        self.assertEqual("cru", fields.Raw({"type": "number"}).io)
        self.assertEqual("cr", fields.Raw({"type": "number"}, io="cr").io)

    def test_raw_default(self):
        foo = fields.Raw({"type": "string"}, default="Foo")
        self.assertEqual({"default": "Foo", "type": "string"}, foo.response)
        self.assertEqual("Foo", foo.default)

        self.assertEqual([], fields.Raw({"type": "array"}, default=list).default)

    def test_raw_output(self):
        foo = fields.Raw({"type": "number"})
        self.assertEqual(12, foo.output("age", {"age": 12}))

        foo_attribute = fields.Raw({"type": "number"}, attribute="years_born_ago")
        self.assertEqual(12.5, foo_attribute.output("age", {"years_born_ago": 12.5}))

    def test_custom(self):
        foo = fields.Custom({"type": "string"}, converter=str.upper, formatter=str.lower)
        self.assertEqual("FOO", foo.convert("foo"))
        self.assertEqual("foo", foo.format("FOO"))

    def test_array(self):
        foo = fields.Array(fields.Integer, unique=True)

        self.assertEqual([1, 2, 3], foo.convert([1, 2, 3]))
        self.assertEqual([], foo.default)
        self.assertEqual([], foo.format(None))

        with self.assertRaises(ValidationError):
            foo.convert([1, 1, 2, 3])

    def test_array_of_dates(self):
        foo = fields.Array(fields.DateString)
        self.assertEqual([date(2016, 1, 1)], foo.convert(["2016-01-01"]))
        self.assertEqual(["2016-01-01"], foo.format([date(2016, 1, 1)]))

    def test_number_convert(self):
        with self.assertRaises(ValidationError):
            fields.Number().convert("nope")

        with self.assertRaises(ValidationError):
            fields.Number(minimum=3).convert(2)

        with self.assertRaises(ValidationError):
            fields.Number(maximum=3, exclusive_maximum=True).convert(3)

        self.assertEqual(3, fields.Number(maximum=3).convert(3))
        self.assertEqual(None, fields.Number(nullable=True).convert(None))

    def test_integer(self):
        self.assertEqual(4, fields.Integer().format(4.0))

        with self.assertRaises(ValidationError):
            fields.PositiveInteger().convert(0)

    def test_boolean(self):
        self.assertIs(True, fields.Boolean().format(1))
        self.assertIs(False, fields.Boolean().convert(False))

    def test_date(self):
        with self.assertRaises(ValidationError):
            fields.Date().convert({"$nope": True})

        self.assertEqual(date(2009, 2, 13), fields.Date().convert({"$date": 1234567000000}))
        self.assertEqual({"$date": 1329177600000}, fields.Date().format(date(2012, 2, 14)))

    def test_date_time(self):
        self.assertEqual(datetime(2009, 2, 13, 23, 16, 40, 0, timezone.utc),
                         fields.DateTime().convert({"$date": 1234567000000}))

        self.assertEqual({"$date": 1329177600000},
                         fields.DateTime().format(datetime(2012, 2, 14, 0, 0, 0, 0, timezone.utc)))

    def test_date_time_string(self):
        self.assertEqual(datetime(2009, 2, 13, 23, 16, 40, 0, timezone.utc),
                         fields.DateTimeString().convert('2009-02-13T23:16:40Z'))

        timestamp = datetime(2009, 2, 13, 23, 16, 40, 0, timezone(timedelta(hours=2)))
        self.assertEqual('2009-02-13T23:16:40+02:00', fields.DateTimeString().format(timestamp))

    def test_uuid(self):
        with self.assertRaises(ValidationError):
            fields.UUID().convert("123456")

        uuid = str(uuid4())
        self.assertEqual(uuid, fields.UUID().convert(uuid))

    def test_string(self):
        with self.assertRaises(ValidationError):
            fields.String(min_length=8).convert("123456")

        with self.assertRaises(ValidationError):
            fields.String(pattern="^[fF]oo$").convert("Boo")

        self.assertEqual("foo", fields.String(pattern="^[fF]oo$").convert("foo"))
        self.assertEqual(None, fields.String(nullable=True).convert(None))

    def test_string_enum(self):
        foo = fields.String(enum=['foo', 'bar'])

        with self.assertRaises(ValidationError) as cx:
            foo.convert("fork")

        self.assertEqual("foo", foo.convert("foo"))
        self.assertEqual(['enum'], [error.validator for error in cx.exception.errors])
        self.assertEqual(['foo', 'bar'], cx.exception.errors[0].validator_value)

    def test_object(self):
        o = fields.Object(fields.Integer)

        self.assertEqual({"x": 123}, o.convert({"x": 123}))
        self.assertEqual({
            "type": "object",
            "additionalProperties": {
                "type": "integer"
            }
        }, o.response)

        with self.assertRaises(ValidationError):
            o.convert({"y": "string"})

    def test_object_properties(self):
        o = fields.Object({
            "created": fields.DateString(),
            "count": fields.Integer(attribute="total")
        })

        self.assertEqual({"created": date(2016, 1, 1), "total": 3},
                         o.convert({"created": "2016-01-01", "count": 3}))
        self.assertEqual({"created": "2016-01-01", "count": 3},
                         o.format({"created": date(2016, 1, 1), "total": 3}))

    def test_any(self):
        self.assertEqual(3, fields.Any().format(3))
        self.assertEqual(None, fields.Any().convert(None))
        self.assertEqual({}, fields.Any().format({}))
