import pytest

from freqresponder import magic
from freqresponder.exceptions import CatalogUnavailable, NotFound


CATALOG_YAML = '''
NODELIST: /srv/fido/pub/nodelist.zip
FILES: /srv/fido/pub/allfiles.txt
2024: /srv/fido/pub/2024.zip
'''


def write_catalog(tmp_path, text):
    path = tmp_path / 'magic.yaml'
    path.write_text(text)
    return path


def test_load_and_resolve(tmp_path):
    catalog = magic.load_catalog(write_catalog(tmp_path, CATALOG_YAML))
    assert len(catalog) == 3
    assert catalog.resolve('NODELIST') == '/srv/fido/pub/nodelist.zip'
    assert catalog.resolve('2024') == '/srv/fido/pub/2024.zip'


def test_resolve_is_exact_match(tmp_path):
    catalog = magic.load_catalog(write_catalog(tmp_path, CATALOG_YAML))
    for name in ['nodelist', 'NODELIST ', 'NODE*', 'nodelist.zip']:
        with pytest.raises(NotFound) as excinfo:
            catalog.resolve(name)
        assert excinfo.value.name == name
        assert excinfo.value.reason == 'no catalog entry'


def test_no_chained_aliases():
    catalog = magic.Catalog({'A': 'B', 'B': '/srv/b.zip'})
    assert catalog.resolve('A') == 'B'


def test_resolve_is_idempotent(tmp_path):
    catalog = magic.load_catalog(write_catalog(tmp_path, CATALOG_YAML))
    assert catalog.resolve('FILES') == catalog.resolve('FILES')
    for _ in range(2):
        with pytest.raises(NotFound):
            catalog.resolve('MISSING')


def test_catalog_is_read_only():
    catalog = magic.Catalog({'A': '/srv/a.zip'})
    with pytest.raises(TypeError):
        catalog.entries['B'] = '/srv/b.zip'


def test_require_existing(tmp_path):
    real = tmp_path / 'real.zip'
    real.write_bytes(b'PK')
    catalog = magic.Catalog({'REAL': str(real),
                             'GONE': str(tmp_path / 'gone.zip')},
                            require_existing=True)
    assert catalog.resolve('REAL') == str(real)
    with pytest.raises(NotFound) as excinfo:
        catalog.resolve('GONE')
    assert excinfo.value.reason == 'missing file'


def test_empty_catalog(tmp_path):
    catalog = magic.load_catalog(write_catalog(tmp_path, ''))
    assert len(catalog) == 0


@pytest.mark.parametrize('text', [
    '- a\n- b\n',
    'just a string\n',
    'A: [unclosed\n',
    'A:\n',
])
def test_bad_catalog(tmp_path, text):
    path = write_catalog(tmp_path, text)
    with pytest.raises(CatalogUnavailable) as excinfo:
        magic.load_catalog(path, session_id='2:5020/1')
    assert excinfo.value.path == str(path)
    assert excinfo.value.session_id == '2:5020/1'


def test_missing_catalog(tmp_path):
    with pytest.raises(CatalogUnavailable):
        magic.load_catalog(tmp_path / 'nope.yaml')


YAML_11_KEYS = '''
ON: /srv/fido/pub/on.zip
NO: /srv/fido/pub/no.zip
010: /srv/fido/pub/010.zip
1_000: /srv/fido/pub/1000.zip
~: /srv/fido/pub/tilde.zip
'''


def test_names_kept_as_written(tmp_path):
    catalog = magic.load_catalog(write_catalog(tmp_path, YAML_11_KEYS))
    assert sorted(catalog.entries) == sorted(['ON', 'NO', '010', '1_000', '~'])
    assert catalog.resolve('ON') == '/srv/fido/pub/on.zip'
    assert catalog.resolve('NO') == '/srv/fido/pub/no.zip'
    assert catalog.resolve('010') == '/srv/fido/pub/010.zip'
    assert catalog.resolve('1_000') == '/srv/fido/pub/1000.zip'
    for name in ['True', 'False', '8', '1000']:
        assert name not in catalog


def test_target_with_line_break(tmp_path):
    path = write_catalog(tmp_path, 'A: /srv/a.zip\nBAD: "/srv/a\\n.zip"\n')
    with pytest.raises(CatalogUnavailable) as excinfo:
        magic.load_catalog(path)
    assert 'BAD' in str(excinfo.value)


def test_utf8_catalog(tmp_path):
    path = tmp_path / 'magic.yaml'
    path.write_bytes('fïle.zip: /srv/fïle.zip\n'.encode('utf-8'))
    catalog = magic.load_catalog(path)
    assert catalog.resolve('fïle.zip') == '/srv/fïle.zip'
