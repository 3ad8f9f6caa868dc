import enum


class SearchMode(str, enum.Enum):
    LIKE = "like"    # case-insensitive substring, no extension needed
    BIGM = "bigm"    # pg_bigm accelerated LIKE
    TRGM = "trgm"    # pg_trgm similarity ranking


# Extension backing each indexed mode
SEARCH_EXTENSIONS: dict[SearchMode, str] = {
    SearchMode.BIGM: "pg_bigm",
    SearchMode.TRGM: "pg_trgm",
}

# Display order of genre categories in the catalog
GENRE_CATEGORY_ORDER: tuple[str, ...] = (
    "松柏類",
    "雑木類",
    "草もの",
    "用品・道具",
    "施設・イベント",
    "その他",
)
