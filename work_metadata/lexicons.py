"""
Lookup tables used by the extraction heuristics.

Everything here is plain data. The functions that use these tables take them
as default arguments so a caller can swap in a different locale set.
"""

# Words that mark a string as a credit line rather than a title
TITLE_ROLE_KEYWORDS = [
    '作者',
    '原作',
    '著者',
    '著',
    '文',
    '圖',
    '繪',
    '畫',
    '作畫',
    '漫畫',
    '插畫',
    '出版社',
    '出版',
    '發行',
    '発行',
    '監修',
    '編輯',
    '編',
    '編集',
    '翻譯',
    '翻訳',
    '譯',
    '訳',
    'illustrator',
    'translator',
    'editor',
    'publisher',
    'author',
    'writer',
]

# Prefixes that open a credit line
TITLE_ROLE_PREFIXES = [
    'by',
    'author',
    'writer',
    'publisher',
    'illustrator',
    'translator',
    'edited by',
    'translated by',
]

# Labels recognized in flattened page text, keyed by fact type.
# Order matters: the first (type, label) that matches a line wins.
TEXT_FACT_LABELS = [
    ('author', ['作者', '作者名', '著者', '著', 'Author', 'Written by', 'Writer']),
    ('publisher', ['出版社', '出版', '出版者', '発行', 'Publisher', 'Imprint']),
    ('pages', ['頁數', '页数', 'ページ数', 'ページ', 'Pages', 'Page Count']),
    ('tag', ['標籤', '标签', 'タグ', '分類', 'ジャンル', 'Genre', 'Category']),
    ('date', [
        '發售日',
        '發行日',
        '発売日',
        '出版日',
        '公開日',
        '更新日',
        'Release Date',
        'Published',
        'Publication Date',
    ]),
    ('title', ['作品名', '原題', 'タイトル', '書名', 'Title', 'Product Name']),
    ('name', ['本名', '名稱', '名称', '名前', 'Name']),
]

FACT_TYPES = frozenset(['author', 'publisher', 'pages', 'tag', 'date', 'title', 'name', 'other'])

# Substrings that mark a creator name as a company or studio.
# ASCII markers are matched on word boundaries, the rest anywhere.
ORGANIZATION_MARKERS = [
    '公司',
    '出版',
    '工作室',
    '工作坊',
    '製作',
    '動畫',
    '有限',
    '社',
    '組',
    'press',
    'studio',
    'studios',
    'pictures',
    'inc',
    'ltd',
]

ORGANIZATION_SCHEMA_TYPES = frozenset(['Organization', 'Corporation', 'Company'])

GENERIC_IMAGE_KEYWORDS = [
    'logo',
    'favicon',
    'icon',
    'sprite',
    'placeholder',
    'default',
    'opengraph',
    'og-image',
    'twitter',
    'share',
    'social',
    'apple-touch',
]

IMAGE_EXTENSIONS = frozenset(['jpg', 'jpeg', 'png', 'webp', 'gif', 'bmp', 'svg', 'avif', 'jfif'])

# Inline <img> alt text that marks decoration
DECORATIVE_ALT_PATTERN = r'logo|icon|placeholder|transparent|pixel'

SITE_NAME_META_KEYS = ['og:site_name']
APPLICATION_NAME_META_KEYS = ['application-name']
GENERIC_SITE_NAME_META_KEYS = ['site_name']

DESCRIPTION_META_KEYS = ['description', 'og:description', 'twitter:description', 'summary']

NEXT_UPDATE_META_KEYS = [
    'next_update',
    'nextupdate',
    'next-release',
    'nextrelease',
    'next_air',
    'nextair',
    'next_episode',
    'next-episode',
    'next-chapter',
    'nextchapter',
    'next-issue',
    'nextissue',
    'next-publication',
    'nextpublication',
    'next-publish',
    'nextpublish',
]

PUBLISHED_META_KEYS = [
    'article:published_time',
    'og:published_time',
    'publish-date',
    'publish_date',
    'datepublished',
    'date_published',
    'dc.date',
    'dc:date',
    'pubdate',
    'datecreated',
    'date-created',
]

UPDATED_META_KEYS = [
    'article:modified_time',
    'og:updated_time',
    'og:modified_time',
    'last-modified',
    'last_modified',
    'datemodified',
    'date_modified',
    'updated_time',
    'modified',
    'dateupdated',
]

BOOK_AUTHOR_META_KEYS = [
    'book:author',
    'books:author',
    'book:authors',
    'books:authors',
    'dcterms:creator',
    'dc.creator',
    'dc:creator',
    'dc.contributor',
    'dcterms:contributor',
]

BOOK_PUBLISHER_META_KEYS = [
    'book:publisher',
    'books:publisher',
    'dcterms:publisher',
    'dc.publisher',
    'dc:publisher',
]

BOOK_RELEASE_META_KEYS = [
    'book:release_date',
    'books:release_date',
    'book:publication_date',
    'books:publication_date',
    'release_date',
    'release-date',
    'release date',
    'published_time',
    'publication_date',
    'publication-date',
]

BOOK_PAGE_META_KEYS = [
    'book:page_count',
    'books:page_count',
    'pagecount',
    'page_count',
    'number_of_pages',
    'number-of-pages',
    'dcterms:extent',
]

# Meta keys whose content is folded into the keyword set
KEYWORD_META_KEYS = ['keywords', 'news_keywords']
KEYWORD_META_FRAGMENTS = ['keyword', 'tag', 'genre', 'category']
KEYWORD_META_CJK_FRAGMENTS = ['タグ', '標籤', '分類', 'ジャンル']

# Fact labels used for values that come from structured data or meta tags
PAGES_FACT_LABEL = '頁數'
AWARD_FACT_LABEL = '獎項'
ISBN_FACT_LABEL = 'ISBN'

# Date fact labels that describe an update rather than a release
UPDATE_LABEL_PATTERN = r'更新|update'

# Link preview endpoint
PREVIEW_IMAGE_META_KEYS = [
    'og:image',
    'og:image:url',
    'og:image:secure_url',
    'og:image:secure-url',
    'og:image:secureurl',
    'twitter:image',
    'twitter:image:src',
    'twitter:image:url',
    'twitter:image0',
    'twitter:image:large',
    'twitter:image:secure',
    'image',
]

PREVIEW_TITLE_META_KEYS = ['og:title', 'twitter:title', 'title']

PREVIEW_SITE_NAME_META_KEYS = [
    'og:site_name',
    'site_name',
    'application-name',
    'twitter:app:name:iphone',
    'twitter:app:name:ipad',
    'twitter:app:name:googleplay',
]

PREVIEW_AUTHOR_KEYWORDS = [
    'author',
    'authors',
    'article:author',
    'book:author',
    'byline',
    'creator',
    'dc.creator',
    'dc:creator',
    'twitter:creator',
    '作者',
    '著者',
]

PREVIEW_DESCRIPTION_META_KEYS = ['description', 'og:description', 'twitter:description']
