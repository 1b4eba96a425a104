import re


# --- start of Flask-RESTful code ---
# Copyright (c) 2013, Twilio, Inc.
# All rights reserved.
# This code is part of Flask-RESTful and is governed by its
# license. Please see the LICENSE file in the root of this package.
def get_value(key, obj, default):
    if hasattr(obj, '__getitem__'):
        try:
            return obj[key]
        except (IndexError, TypeError, KeyError):
            pass
    return getattr(obj, key, default)
# --- end of Flask-RESTful code ---


class AttributeDict(dict):
    __getattr__ = dict.__getitem__
    __setattr__ = dict.__setitem__


def is_blank(value):
    """
    ``None``, ``False``, whitespace-only strings and empty containers are blank.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list, tuple, set, frozenset)):
        return len(value) == 0
    try:
        return len(value) == 0
    except TypeError:
        return False


def freeze(value):
    """
    Returns a hashable representation of a JSON-like value.
    """
    if isinstance(value, dict):
        return frozenset((key, freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, set):
        return frozenset(freeze(item) for item in value)
    return value


_IRREGULAR = (
    ('person', 'people'),
    ('man', 'men'),
    ('child', 'children'),
    ('sex', 'sexes'),
    ('move', 'moves'),
    ('zombie', 'zombies'),
)

_UNCOUNTABLE = {'equipment', 'information', 'rice', 'money', 'species', 'series', 'fish', 'sheep', 'jeans',
                'police', 'metadata', 'data'}

_PLURALS = (
    (r'(quiz)$', r'\1zes'),
    (r'^(oxen)$', r'\1'),
    (r'^(ox)$', r'\1en'),
    (r'(m|l)ice$', r'\1ice'),
    (r'(m|l)ouse$', r'\1ice'),
    (r'(matr|vert|ind)(?:ix|ex)$', r'\1ices'),
    (r'(x|ch|ss|sh)$', r'\1es'),
    (r'([^aeiouy]|qu)y$', r'\1ies'),
    (r'(hive)$', r'\1s'),
    (r'(?:([^f])fe|([lr])f)$', r'\1\2ves'),
    (r'sis$', 'ses'),
    (r'([ti])a$', r'\1a'),
    (r'([ti])um$', r'\1a'),
    (r'(buffal|tomat)o$', r'\1oes'),
    (r'(bu)s$', r'\1ses'),
    (r'(alias|status)$', r'\1es'),
    (r'(octop|vir)i$', r'\1i'),
    (r'(octop|vir)us$', r'\1i'),
    (r'^(ax|test)is$', r'\1es'),
    (r's$', 's'),
    (r'$', 's'),
)

_SINGULARS = (
    (r'(database)s$', r'\1'),
    (r'(quiz)zes$', r'\1'),
    (r'(matr)ices$', r'\1ix'),
    (r'(vert|ind)ices$', r'\1ex'),
    (r'^(ox)en', r'\1'),
    (r'(alias|status)(es)?$', r'\1'),
    (r'(octop|vir)(us|i)$', r'\1us'),
    (r'^(a)x[ie]s$', r'\1xis'),
    (r'(cris|test)(is|es)$', r'\1is'),
    (r'(shoe)s$', r'\1'),
    (r'(o)es$', r'\1'),
    (r'(bus)(es)?$', r'\1'),
    (r'(m|l)ice$', r'\1ouse'),
    (r'(x|ch|ss|sh)es$', r'\1'),
    (r'(m)ovies$', r'\1ovie'),
    (r'(s)eries$', r'\1eries'),
    (r'([^aeiouy]|qu)ies$', r'\1y'),
    (r'([lr])ves$', r'\1f'),
    (r'(tive)s$', r'\1'),
    (r'(hive)s$', r'\1'),
    (r'([^f])ves$', r'\1fe'),
    (r'(t)he(sis|ses)$', r'\1hesis'),
    (r'(s)ynop(sis|ses)$', r'\1ynopsis'),
    (r'(p)rogno(sis|ses)$', r'\1rognosis'),
    (r'(p)arenthe(sis|ses)$', r'\1arenthesis'),
    (r'(d)iagno(sis|ses)$', r'\1iagnosis'),
    (r'(b)a(sis|ses)$', r'\1asis'),
    (r'(a)naly(sis|ses)$', r'\1nalysis'),
    (r'([ti])a$', r'\1um'),
    (r'(n)ews$', r'\1ews'),
    (r'(ss)$', r'\1'),
    (r's$', ''),
)


def _inflect(word, rules, irregular):
    if not word:
        return word

    prefix, _, last_word = word.rpartition('_')
    if prefix:
        prefix += '_'

    if last_word.lower() in _UNCOUNTABLE:
        return word

    for source, target in irregular:
        if last_word.lower() == source:
            return prefix + last_word[:1] + target[1:]
        if last_word.lower() == target:
            return word

    for pattern, replacement in rules:
        if re.search(pattern, last_word, re.IGNORECASE):
            return prefix + re.sub(pattern, replacement, last_word, flags=re.IGNORECASE)
    return word


def pluralize(word):
    """
    >>> pluralize('company')
    'companies'
    >>> pluralize('admin_user')
    'admin_users'
    """
    return _inflect(word, _PLURALS, _IRREGULAR)


def singularize(word):
    """
    >>> singularize('comments')
    'comment'
    """
    return _inflect(word, _SINGULARS, tuple((plural, singular) for singular, plural in _IRREGULAR))


def underscore(word):
    """
    >>> underscore('AdminUser')
    'admin_user'
    """
    word = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', word)
    word = re.sub(r'([a-z\d])([A-Z])', r'\1_\2', word)
    return word.replace('-', '_').lower()


def camelize(word):
    return ''.join(part[:1].upper() + part[1:] for part in underscore(word).split('_'))


def classify(name):
    """
    Returns the class name for a plural or singular attribute name.

    >>> classify('comments')
    'Comment'
    """
    return camelize(singularize(name))


def tableize(class_name):
    """
    >>> tableize('AdminUser')
    'admin_users'
    """
    return pluralize(underscore(class_name))
