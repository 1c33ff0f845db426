"""Shared fixtures for the screenspec test suite."""

import textwrap

import pytest

from screenspec.config import SpecConfig
from screenspec.contracts import RawDocument, Section, SectionKind


SAMPLE_DOC = textwrap.dedent(
    """\
    # ABC_01 ログイン画面

    ## 概要 / Overview
    ユーザーがIDとパスワードでログインする画面。
    Login screen where the user signs in with ID and password.

    ## 項目定義 / Item Definition
    | No | 項目名(日本語) | Item Name (EN) | 項目タイプ | 必須 | データ型 | 桁数 | フォーマット | 初期値 | 説明(日本語) | Description (EN) |
    |---|---|---|---|---|---|---|---|---|---|---|
    | 1 | ユーザーID | User ID | テキスト | ○ | 文字列 | 20 | 半角英数 | - | ユーザーIDを入力する。未入力の場合はHCK-001を表示する。 | Enter the user ID. Shows HCK-001 when empty. |
    | 2 | パスワード | Password | テキスト | ○ | 文字列 | 32 | - | - | パスワードを入力する。8文字未満の場合はHCK-002: パスワードが短すぎます。 | Enter the password. |
    | 3 | ログインボタン | Login Button | ボタン | - | - | - | - | - | 押下で認証する。アクションID 1を参照。 | Authenticates on tap. Refer to action ID 1. |
    | 4 | ヘルプリンク | Help Link | リンク | - | - | - | - | - | ヘルプを表示する。<br>アクションID 2を参照。 | Shows help. Refer to action ID 2. |

    ## アクション / Action
    | No | トリガー(日本語) | Trigger (EN) | 画面遷移 | アクション詳細(日本語) | Action Detail (EN) | 備考 |
    |---|---|---|---|---|---|---|
    | 1 | ログインボタン押下 | Tap login button | HOM_01 | 認証APIを呼び出す。<br>失敗時はAUT-001を表示する。 | Call the auth API. | - |
    | 2 | ヘルプリンク押下 | Tap help link | ヘルプダイアログ (HLP_01) | ヘルプダイアログを表示する。 | Open the help dialog. | - |
    """
)


@pytest.fixture
def sample_text():
    return SAMPLE_DOC


@pytest.fixture
def raw_doc():
    return RawDocument.from_text(SAMPLE_DOC)


@pytest.fixture
def spec_config():
    return SpecConfig(created="2024-01-10", updated="2024-02-01", version="1.2")


@pytest.fixture
def make_section():
    """Build a Section of the given kind from a header line plus body text."""

    def _make(body, kind=SectionKind.ITEM_TABLE, header="## Section"):
        lines = tuple([header] + textwrap.dedent(body).splitlines())
        return Section(kind=kind, line_start=0, line_end=len(lines), lines=lines, header=header)

    return _make
