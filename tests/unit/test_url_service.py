import pytest

from stylepress.errors import PathEscapeError
from stylepress.services.url_service import rewrite_urls, site_segments


@pytest.fixture
def theme(tmp_path):
    css_dir = tmp_path / "css"
    css_dir.mkdir()
    return tmp_path, css_dir / "theme.css"


def test_parent_reference_resolves_to_site_root(theme):
    webroot, source = theme

    result = rewrite_urls("a{background:url(../img/bg.png)}", source, webroot=webroot)

    assert result == "a{background:url(/img/bg.png)}"


def test_reference_above_webroot_raises(theme):
    webroot, source = theme

    with pytest.raises(PathEscapeError) as excinfo:
        rewrite_urls("a{background:url(../../img/bg.png)}", source, webroot=webroot)

    assert excinfo.value.url == "../../img/bg.png"
    assert excinfo.value.path.endswith("css/theme.css")
    assert "goes above webroot" in str(excinfo.value)


def test_sibling_reference_gets_directory_prefix(theme):
    webroot, source = theme

    result = rewrite_urls('a{src:url("fonts/a.woff")}', source, webroot=webroot)

    assert result == 'a{src:url("/css/fonts/a.woff")}'


def test_dot_slash_reference_is_normalised(theme):
    webroot, source = theme

    result = rewrite_urls("a{src:url('./img/x.png')}", source, webroot=webroot)

    assert result == "a{src:url('/css/img/x.png')}"


@pytest.mark.parametrize(
    "css",
    [
        "a{background:url(/img/bg.png)}",
        "a{background:url(http://cdn.example.com/bg.png)}",
        "a{background:url('https://cdn.example.com/bg.png')}",
        "a{background:url(data:image/png;base64,AAAA)}",
        'a{background:url("data:image/svg+xml;utf8,<svg></svg>")}',
        "a{clip-path:url(#clip)}",
    ],
)
def test_passthrough_references_are_untouched(theme, css):
    webroot, source = theme

    assert rewrite_urls(css, source, webroot=webroot) == css


def test_sub_folder_prefixes_rewritten_urls(theme):
    webroot, source = theme

    result = rewrite_urls(
        "a{background:url(../img/bg.png)} b{background:url(x.png)}",
        source,
        webroot=webroot,
        sub_folder="/blog",
    )

    assert result == "a{background:url(/blog/img/bg.png)} b{background:url(/blog/css/x.png)}"


def test_source_at_webroot_cannot_climb(tmp_path):
    source = tmp_path / "site.css"

    assert rewrite_urls("a{b:url(img/a.png)}", source, webroot=tmp_path) == "a{b:url(/img/a.png)}"
    with pytest.raises(PathEscapeError):
        rewrite_urls("a{b:url(../a.png)}", source, webroot=tmp_path)


def test_whitespace_inside_url_is_tolerated(theme):
    webroot, source = theme

    result = rewrite_urls("a{b:url( ../img/bg.png )}", source, webroot=webroot)

    assert result == "a{b:url( /img/bg.png)}"


def test_site_segments(tmp_path):
    source = tmp_path / "assets" / "css" / "main.css"

    assert site_segments(source, webroot=tmp_path) == ["assets", "css"]
    assert site_segments(source, webroot=tmp_path, sub_folder="/shop") == [
        "shop",
        "assets",
        "css",
    ]
    assert site_segments(tmp_path / "main.css", webroot=tmp_path) == []
