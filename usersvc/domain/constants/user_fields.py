"""Constants for User model field names"""


class UserFields:
    """Field name constants for User model (shared by wire, domain and storage)"""
    ID = "id"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    NICKNAME = "nickname"
    EMAIL = "email"
    PASSWORD = "password"
    COUNTRY = "country"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"

    # Pagination
    PAGE_TOKEN = "page_token"

    # Relational storage
    TABLE_NAME = "users"
    COUNTRY_INDEX = "idx_users_country"
