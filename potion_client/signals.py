from blinker import Namespace

_potion = Namespace()

before_save = _potion.signal('before-save')

after_save = _potion.signal('after-save')

before_create = _potion.signal('before-create')

after_create = _potion.signal('after-create')

before_update = _potion.signal('before-update')

after_update = _potion.signal('after-update')

before_destroy = _potion.signal('before-destroy')

after_destroy = _potion.signal('after-destroy')

after_find = _potion.signal('after-find')

after_initialize = _potion.signal('after-initialize')
