import builtins
import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from uuid import UUID

from authordesk.domain.entities import (
    AdminUser,
    BlogMedia,
    BlogPost,
    BlogTag,
    Book,
    ContactAttachment,
    ContactMessage,
    Engagement,
    LogEntry,
)
from authordesk.ports.errors import BackendError, DuplicateRecordError


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _like(term: str) -> str:
    return f"%{term.strip()}%"


def _order_clause(sort_by: str, sort_order: str, allowed: set[str], default: str) -> str:
    column = sort_by if sort_by in allowed else default
    direction = "ASC" if sort_order.lower() == "asc" else "DESC"
    return f" ORDER BY {column} {direction}"


def _backend_error(e: sqlite3.Error) -> BackendError:
    if isinstance(e, sqlite3.IntegrityError):
        if "UNIQUE" in str(e):
            return DuplicateRecordError(str(e))
        return BackendError(str(e), code="invalid")
    return BackendError(str(e))


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit on success; every sqlite failure surfaces as a BackendError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise _backend_error(e) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise _backend_error(e) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _write(self, sql: str, params: tuple[Any, ...] | list[Any]) -> int:
        with self._transaction() as conn:
            return conn.execute(sql, params).rowcount

    def _fetch_one(self, sql: str, params: tuple[Any, ...] | list[Any]) -> dict[str, Any] | None:
        with self._transaction() as conn:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row

    def _fetch_all(
        self, sql: str, params: tuple[Any, ...] | list[Any]
    ) -> builtins.list[dict[str, Any]]:
        with self._transaction() as conn:
            rows: builtins.list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows

    def _paged(
        self,
        base_query: str,
        params: builtins.list[Any],
        order: str,
        limit: int | None,
        offset: int,
    ) -> tuple[builtins.list[dict[str, Any]], int]:
        count_row = self._fetch_one(f"SELECT COUNT(*) AS cnt FROM ({base_query})", params)
        total = count_row["cnt"] if count_row else 0

        query = base_query + order
        page_params = list(params)
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            page_params.extend([limit, offset])
        return self._fetch_all(query, page_params), total


class SQLiteAdminUserRepo(_SQLiteRepo):
    def _map(self, row: dict[str, Any]) -> AdminUser:
        return AdminUser(
            id=UUID(row["id"]),
            email=row["email"],
            display_name=row["display_name"],
            password_hash=row["password_hash"],
            status=row["status"],
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def get_by_email(self, email: str) -> AdminUser | None:
        row = self._fetch_one(
            "SELECT * FROM admin_users WHERE LOWER(email) = ?", (email.strip().lower(),)
        )
        return self._map(row) if row else None

    def get_by_id(self, user_id: UUID) -> AdminUser | None:
        row = self._fetch_one("SELECT * FROM admin_users WHERE id = ?", (str(user_id),))
        return self._map(row) if row else None

    def save(self, user: AdminUser) -> AdminUser:
        self._write(
            """
            INSERT INTO admin_users (
                id, email, display_name, password_hash, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                email=excluded.email,
                display_name=excluded.display_name,
                password_hash=excluded.password_hash,
                status=excluded.status,
                updated_at=excluded.updated_at
            """,
            (
                str(user.id),
                user.email.strip().lower(),
                user.display_name,
                user.password_hash,
                user.status,
                _iso(user.created_at),
                _iso(user.updated_at),
            ),
        )
        return user


class SQLiteBookRepo(_SQLiteRepo):
    def _map(self, row: dict[str, Any]) -> Book:
        return Book(
            id=UUID(row["id"]),
            title=row["title"],
            author=row["author"],
            description=row["description"],
            cover_image=row["cover_image"],
            genre=row["genre"],
            published_at=_parse_dt(row["published_at"]),
            isbn=row["isbn"],
            price=row["price"],
            purchase_url=row["purchase_url"],
            tags=json.loads(row["tags_json"]),
            featured=bool(row["featured"]),
            content=row["content"],
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def get_by_id(self, book_id: UUID) -> Book | None:
        row = self._fetch_one("SELECT * FROM books WHERE id = ?", (str(book_id),))
        return self._map(row) if row else None

    def save(self, book: Book) -> Book:
        self._write(
            """
            INSERT INTO books (
                id, title, author, description, cover_image, genre, published_at,
                isbn, price, purchase_url, tags_json, featured, content,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title=excluded.title,
                author=excluded.author,
                description=excluded.description,
                cover_image=excluded.cover_image,
                genre=excluded.genre,
                published_at=excluded.published_at,
                isbn=excluded.isbn,
                price=excluded.price,
                purchase_url=excluded.purchase_url,
                tags_json=excluded.tags_json,
                featured=excluded.featured,
                content=excluded.content,
                updated_at=excluded.updated_at
            """,
            (
                str(book.id),
                book.title,
                book.author,
                book.description,
                book.cover_image,
                book.genre,
                _iso(book.published_at),
                book.isbn,
                book.price,
                book.purchase_url,
                json.dumps(book.tags),
                int(book.featured),
                book.content,
                _iso(book.created_at),
                _iso(book.updated_at),
            ),
        )
        return book

    def delete(self, book_id: UUID) -> None:
        self._write("DELETE FROM books WHERE id = ?", (str(book_id),))

    def list(
        self,
        *,
        search: str | None = None,
        genre: str | None = None,
        featured: bool | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[builtins.list[Book], int]:
        query = "SELECT * FROM books WHERE 1=1"
        params: builtins.list[Any] = []

        if search and search.strip():
            query += " AND (title LIKE ? OR author LIKE ? OR description LIKE ?)"
            params.extend([_like(search)] * 3)
        if genre:
            query += " AND genre = ?"
            params.append(genre)
        if featured is not None:
            query += " AND featured = ?"
            params.append(int(featured))

        rows, total = self._paged(query, params, " ORDER BY created_at DESC", limit, offset)
        return [self._map(r) for r in rows], total

    def count(self, *, featured: bool | None = None) -> int:
        if featured is None:
            row = self._fetch_one("SELECT COUNT(*) AS cnt FROM books", ())
        else:
            row = self._fetch_one(
                "SELECT COUNT(*) AS cnt FROM books WHERE featured = ?", (int(featured),)
            )
        return row["cnt"] if row else 0

    def distinct_genres(self) -> builtins.list[str]:
        rows = self._fetch_all(
            "SELECT DISTINCT genre FROM books "
            "WHERE genre IS NOT NULL AND TRIM(genre) != '' ORDER BY genre",
            (),
        )
        return [r["genre"] for r in rows]


class SQLiteBlogTagRepo(_SQLiteRepo):
    def _map(self, row: dict[str, Any]) -> BlogTag:
        return BlogTag(
            id=UUID(row["id"]),
            name=row["name"],
            slug=row["slug"],
            description=row["description"],
            color=row["color"],
            created_at=_parse_dt(row["created_at"]),
        )

    def get_by_id(self, tag_id: UUID) -> BlogTag | None:
        row = self._fetch_one("SELECT * FROM blog_tags WHERE id = ?", (str(tag_id),))
        return self._map(row) if row else None

    def get_by_slug(self, slug: str) -> BlogTag | None:
        row = self._fetch_one("SELECT * FROM blog_tags WHERE slug = ?", (slug,))
        return self._map(row) if row else None

    def save(self, tag: BlogTag) -> BlogTag:
        self._write(
            """
            INSERT INTO blog_tags (id, name, slug, description, color, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name=excluded.name,
                slug=excluded.slug,
                description=excluded.description,
                color=excluded.color
            """,
            (
                str(tag.id),
                tag.name,
                tag.slug,
                tag.description,
                tag.color,
                _iso(tag.created_at),
            ),
        )
        return tag

    def delete(self, tag_id: UUID) -> None:
        self._write("DELETE FROM blog_tags WHERE id = ?", (str(tag_id),))

    def list_all(self) -> builtins.list[BlogTag]:
        rows = self._fetch_all("SELECT * FROM blog_tags ORDER BY name ASC", ())
        return [self._map(r) for r in rows]

    def is_in_use(self, tag_id: UUID) -> bool:
        row = self._fetch_one(
            "SELECT 1 AS used FROM blog_post_tags WHERE tag_id = ? LIMIT 1", (str(tag_id),)
        )
        return row is not None


class SQLiteBlogPostRepo(_SQLiteRepo):
    SORT_FIELDS = {"created_at", "updated_at", "published_at", "title"}

    def _tags_for(self, post_id: str) -> builtins.list[BlogTag]:
        rows = self._fetch_all(
            """
            SELECT t.* FROM blog_tags t
            JOIN blog_post_tags pt ON pt.tag_id = t.id
            WHERE pt.post_id = ?
            ORDER BY t.name ASC
            """,
            (post_id,),
        )
        return [
            BlogTag(
                id=UUID(r["id"]),
                name=r["name"],
                slug=r["slug"],
                description=r["description"],
                color=r["color"],
                created_at=_parse_dt(r["created_at"]),
            )
            for r in rows
        ]

    def _map(self, row: dict[str, Any]) -> BlogPost:
        return BlogPost(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            excerpt=row["excerpt"],
            content=row["content"],
            featured_image=row["featured_image"],
            featured_media_type=row["featured_media_type"],
            author_id=row["author_id"],
            is_published=bool(row["is_published"]),
            published_at=_parse_dt(row["published_at"]),
            reading_time=row["reading_time"],
            featured=bool(row["featured"]),
            seo_title=row["seo_title"],
            seo_description=row["seo_description"],
            tags=self._tags_for(row["id"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def get_by_id(self, post_id: UUID) -> BlogPost | None:
        row = self._fetch_one("SELECT * FROM blog_posts WHERE id = ?", (str(post_id),))
        return self._map(row) if row else None

    def get_by_slug(self, slug: str) -> BlogPost | None:
        row = self._fetch_one("SELECT * FROM blog_posts WHERE slug = ?", (slug,))
        return self._map(row) if row else None

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        if exclude_id is None:
            row = self._fetch_one("SELECT id FROM blog_posts WHERE slug = ?", (slug,))
        else:
            row = self._fetch_one(
                "SELECT id FROM blog_posts WHERE slug = ? AND id != ?", (slug, str(exclude_id))
            )
        return row is not None

    def save(self, post: BlogPost) -> BlogPost:
        self._write(
            """
            INSERT INTO blog_posts (
                id, title, slug, excerpt, content, featured_image, featured_media_type,
                author_id, is_published, published_at, reading_time, featured,
                seo_title, seo_description, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title=excluded.title,
                slug=excluded.slug,
                excerpt=excluded.excerpt,
                content=excluded.content,
                featured_image=excluded.featured_image,
                featured_media_type=excluded.featured_media_type,
                author_id=excluded.author_id,
                is_published=excluded.is_published,
                published_at=excluded.published_at,
                reading_time=excluded.reading_time,
                featured=excluded.featured,
                seo_title=excluded.seo_title,
                seo_description=excluded.seo_description,
                updated_at=excluded.updated_at
            """,
            (
                str(post.id),
                post.title,
                post.slug,
                post.excerpt,
                post.content,
                post.featured_image,
                post.featured_media_type,
                post.author_id,
                int(post.is_published),
                _iso(post.published_at),
                post.reading_time,
                int(post.featured),
                post.seo_title,
                post.seo_description,
                _iso(post.created_at),
                _iso(post.updated_at),
            ),
        )
        return post

    def set_tags(self, post_id: UUID, tag_ids: builtins.list[UUID]) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM blog_post_tags WHERE post_id = ?", (str(post_id),))
            for tag_id in dict.fromkeys(tag_ids):
                conn.execute(
                    "INSERT INTO blog_post_tags (post_id, tag_id) VALUES (?, ?)",
                    (str(post_id), str(tag_id)),
                )

    def delete(self, post_id: UUID) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM blog_post_tags WHERE post_id = ?", (str(post_id),))
            conn.execute("DELETE FROM blog_posts WHERE id = ?", (str(post_id),))

    def list(
        self,
        *,
        search: str | None = None,
        status: str = "all",
        author_id: str | None = None,
        tag_slugs: builtins.list[str] | None = None,
        featured: bool | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[builtins.list[BlogPost], int]:
        query = "SELECT * FROM blog_posts WHERE 1=1"
        params: builtins.list[Any] = []

        if search and search.strip():
            query += " AND (title LIKE ? OR content LIKE ? OR excerpt LIKE ?)"
            params.extend([_like(search)] * 3)
        if status == "published":
            query += " AND is_published = 1 AND published_at IS NOT NULL"
        elif status == "draft":
            query += " AND is_published = 0"
        if author_id:
            query += " AND author_id = ?"
            params.append(author_id)
        if tag_slugs:
            placeholders = ", ".join("?" for _ in tag_slugs)
            query += (
                " AND id IN (SELECT pt.post_id FROM blog_post_tags pt"
                " JOIN blog_tags t ON t.id = pt.tag_id"
                f" WHERE t.slug IN ({placeholders}))"
            )
            params.extend(tag_slugs)
        if featured is not None:
            query += " AND featured = ?"
            params.append(int(featured))
        if date_from:
            query += " AND created_at >= ?"
            params.append(_iso(date_from))
        if date_to:
            query += " AND created_at <= ?"
            params.append(_iso(date_to))

        order = _order_clause(sort_by, sort_order, self.SORT_FIELDS, "created_at")
        rows, total = self._paged(query, params, order, limit, offset)
        return [self._map(r) for r in rows], total

    def count(self, *, is_published: bool | None = None) -> int:
        if is_published is None:
            row = self._fetch_one("SELECT COUNT(*) AS cnt FROM blog_posts", ())
        else:
            row = self._fetch_one(
                "SELECT COUNT(*) AS cnt FROM blog_posts WHERE is_published = ?",
                (int(is_published),),
            )
        return row["cnt"] if row else 0


class SQLiteBlogMediaRepo(_SQLiteRepo):
    def _map(self, row: dict[str, Any]) -> BlogMedia:
        return BlogMedia(
            id=UUID(row["id"]),
            post_id=row["post_id"],
            file_name=row["file_name"],
            file_path=row["file_path"],
            file_url=row["file_url"],
            file_type=row["file_type"],
            mime_type=row["mime_type"],
            file_size=row["file_size"],
            width=row["width"],
            height=row["height"],
            duration=row["duration"],
            alt_text=row["alt_text"],
            caption=row["caption"],
            is_featured=bool(row["is_featured"]),
            sort_order=row["sort_order"],
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def get_by_id(self, media_id: UUID) -> BlogMedia | None:
        row = self._fetch_one("SELECT * FROM blog_media WHERE id = ?", (str(media_id),))
        return self._map(row) if row else None

    def save(self, media: BlogMedia) -> BlogMedia:
        self._write(
            """
            INSERT INTO blog_media (
                id, post_id, file_name, file_path, file_url, file_type, mime_type,
                file_size, width, height, duration, alt_text, caption, is_featured,
                sort_order, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                post_id=excluded.post_id,
                alt_text=excluded.alt_text,
                caption=excluded.caption,
                is_featured=excluded.is_featured,
                sort_order=excluded.sort_order,
                updated_at=excluded.updated_at
            """,
            (
                str(media.id),
                media.post_id,
                media.file_name,
                media.file_path,
                media.file_url,
                media.file_type,
                media.mime_type,
                media.file_size,
                media.width,
                media.height,
                media.duration,
                media.alt_text,
                media.caption,
                int(media.is_featured),
                media.sort_order,
                _iso(media.created_at),
                _iso(media.updated_at),
            ),
        )
        return media

    def delete(self, media_id: UUID) -> None:
        self._write("DELETE FROM blog_media WHERE id = ?", (str(media_id),))

    def list_for_post(self, post_id: str) -> builtins.list[BlogMedia]:
        rows = self._fetch_all(
            "SELECT * FROM blog_media WHERE post_id = ? ORDER BY sort_order ASC, created_at ASC",
            (post_id,),
        )
        return [self._map(r) for r in rows]

    def max_sort_order(self, post_id: str) -> int:
        row = self._fetch_one(
            "SELECT MAX(sort_order) AS max_order FROM blog_media WHERE post_id = ?", (post_id,)
        )
        if not row or row["max_order"] is None:
            return -1
        return int(row["max_order"])

    def clear_featured(self, post_id: str, except_id: UUID | None = None) -> None:
        if except_id is None:
            self._write("UPDATE blog_media SET is_featured = 0 WHERE post_id = ?", (post_id,))
        else:
            self._write(
                "UPDATE blog_media SET is_featured = 0 WHERE post_id = ? AND id != ?",
                (post_id, str(except_id)),
            )

    def reassign_post(self, from_post_id: str, to_post_id: str) -> int:
        return self._write(
            "UPDATE blog_media SET post_id = ? WHERE post_id = ?", (to_post_id, from_post_id)
        )


class SQLiteEngagementRepo(_SQLiteRepo):
    SORT_FIELDS = {"created_at", "updated_at", "date", "title", "price", "status"}

    def _map(self, row: dict[str, Any]) -> Engagement:
        return Engagement(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            type=row["type"],
            description=row["description"],
            content=row["content"],
            images=json.loads(row["images_json"]),
            date=_parse_dt(row["date"]),
            duration=row["duration"],
            price=row["price"],
            max_attendees=row["max_attendees"],
            location=row["location"],
            is_virtual=bool(row["is_virtual"]),
            is_featured=bool(row["is_featured"]),
            booking_url=row["booking_url"],
            status=row["status"],
            tags=json.loads(row["tags_json"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    def get_by_id(self, engagement_id: UUID) -> Engagement | None:
        row = self._fetch_one("SELECT * FROM engagements WHERE id = ?", (str(engagement_id),))
        return self._map(row) if row else None

    def get_by_slug(self, slug: str) -> Engagement | None:
        row = self._fetch_one("SELECT * FROM engagements WHERE slug = ?", (slug,))
        return self._map(row) if row else None

    def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        if exclude_id is None:
            row = self._fetch_one("SELECT id FROM engagements WHERE slug = ?", (slug,))
        else:
            row = self._fetch_one(
                "SELECT id FROM engagements WHERE slug = ? AND id != ?", (slug, str(exclude_id))
            )
        return row is not None

    def save(self, engagement: Engagement) -> Engagement:
        self._write(
            """
            INSERT INTO engagements (
                id, title, slug, type, description, content, images_json, date,
                duration, price, max_attendees, location, is_virtual, is_featured,
                booking_url, status, tags_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                title=excluded.title,
                slug=excluded.slug,
                type=excluded.type,
                description=excluded.description,
                content=excluded.content,
                images_json=excluded.images_json,
                date=excluded.date,
                duration=excluded.duration,
                price=excluded.price,
                max_attendees=excluded.max_attendees,
                location=excluded.location,
                is_virtual=excluded.is_virtual,
                is_featured=excluded.is_featured,
                booking_url=excluded.booking_url,
                status=excluded.status,
                tags_json=excluded.tags_json,
                updated_at=excluded.updated_at
            """,
            (
                str(engagement.id),
                engagement.title,
                engagement.slug,
                engagement.type,
                engagement.description,
                engagement.content,
                json.dumps(engagement.images),
                _iso(engagement.date),
                engagement.duration,
                engagement.price,
                engagement.max_attendees,
                engagement.location,
                int(engagement.is_virtual),
                int(engagement.is_featured),
                engagement.booking_url,
                engagement.status,
                json.dumps(engagement.tags),
                _iso(engagement.created_at),
                _iso(engagement.updated_at),
            ),
        )
        return engagement

    def delete(self, engagement_id: UUID) -> None:
        self._write("DELETE FROM engagements WHERE id = ?", (str(engagement_id),))

    def list(
        self,
        *,
        search: str | None = None,
        engagement_type: str | None = None,
        status: str | None = None,
        featured: bool | None = None,
        is_virtual: bool | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int = 12,
        offset: int = 0,
    ) -> tuple[builtins.list[Engagement], int]:
        query = "SELECT * FROM engagements WHERE 1=1"
        params: builtins.list[Any] = []

        if search and search.strip():
            query += " AND (title LIKE ? OR description LIKE ?)"
            params.extend([_like(search)] * 2)
        if engagement_type:
            query += " AND type = ?"
            params.append(engagement_type)
        if status:
            query += " AND status = ?"
            params.append(status)
        if featured is not None:
            query += " AND is_featured = ?"
            params.append(int(featured))
        if is_virtual is not None:
            query += " AND is_virtual = ?"
            params.append(int(is_virtual))
        if date_from:
            query += " AND date >= ?"
            params.append(_iso(date_from))
        if date_to:
            query += " AND date <= ?"
            params.append(_iso(date_to))

        order = _order_clause(sort_by, sort_order, self.SORT_FIELDS, "created_at")
        rows, total = self._paged(query, params, order, limit, offset)
        return [self._map(r) for r in rows], total

    def all_for_stats(self) -> builtins.list[Engagement]:
        rows = self._fetch_all("SELECT * FROM engagements", ())
        return [self._map(r) for r in rows]


class SQLiteMessageRepo(_SQLiteRepo):
    SORT_FIELDS = {"created_at", "full_name", "email", "purpose", "status"}

    def _attachments_for(self, message_id: str) -> builtins.list[ContactAttachment]:
        rows = self._fetch_all(
            "SELECT * FROM contact_attachments WHERE message_id = ? ORDER BY created_at ASC",
            (message_id,),
        )
        return [self._map_attachment(r) for r in rows]

    def _map_attachment(self, row: dict[str, Any]) -> ContactAttachment:
        return ContactAttachment(
            id=UUID(row["id"]),
            message_id=UUID(row["message_id"]),
            file_name=row["file_name"],
            file_path=row["file_path"],
            file_size=row["file_size"],
            file_type=row["file_type"],
            created_at=_parse_dt(row["created_at"]),
        )

    def _map(self, row: dict[str, Any]) -> ContactMessage:
        return ContactMessage(
            id=UUID(row["id"]),
            full_name=row["full_name"],
            email=row["email"],
            purpose=row["purpose"],
            message=row["message"],
            status=row["status"],
            created_at=_parse_dt(row["created_at"]),
            attachments=self._attachments_for(row["id"]),
        )

    def get_by_id(self, message_id: UUID) -> ContactMessage | None:
        row = self._fetch_one("SELECT * FROM contact_messages WHERE id = ?", (str(message_id),))
        return self._map(row) if row else None

    def save(self, message: ContactMessage) -> ContactMessage:
        self._write(
            """
            INSERT INTO contact_messages (
                id, full_name, email, purpose, message, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                full_name=excluded.full_name,
                email=excluded.email,
                purpose=excluded.purpose,
                message=excluded.message,
                status=excluded.status
            """,
            (
                str(message.id),
                message.full_name,
                message.email,
                message.purpose,
                message.message,
                message.status,
                _iso(message.created_at),
            ),
        )
        return message

    def delete(self, message_id: UUID) -> None:
        with self._transaction() as conn:
            conn.execute(
                "DELETE FROM contact_attachments WHERE message_id = ?", (str(message_id),)
            )
            conn.execute("DELETE FROM contact_messages WHERE id = ?", (str(message_id),))

    def save_attachment(self, attachment: ContactAttachment) -> ContactAttachment:
        self._write(
            """
            INSERT INTO contact_attachments (
                id, message_id, file_name, file_path, file_size, file_type, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(attachment.id),
                str(attachment.message_id),
                attachment.file_name,
                attachment.file_path,
                attachment.file_size,
                attachment.file_type,
                _iso(attachment.created_at),
            ),
        )
        return attachment

    def delete_attachments_for(self, message_id: UUID) -> builtins.list[ContactAttachment]:
        attachments = self._attachments_for(str(message_id))
        self._write("DELETE FROM contact_attachments WHERE message_id = ?", (str(message_id),))
        return attachments

    def update_status_many(self, message_ids: builtins.list[UUID], status: str) -> int:
        if not message_ids:
            return 0
        placeholders = ", ".join("?" for _ in message_ids)
        return self._write(
            f"UPDATE contact_messages SET status = ? WHERE id IN ({placeholders})",
            [status, *[str(m) for m in message_ids]],
        )

    def list(
        self,
        *,
        status: str | None = None,
        purpose: str | None = None,
        search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        has_attachments: bool | None = None,
        message_ids: builtins.list[UUID] | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = 50,
        offset: int = 0,
    ) -> tuple[builtins.list[ContactMessage], int]:
        query = "SELECT * FROM contact_messages WHERE 1=1"
        params: builtins.list[Any] = []

        if message_ids is not None:
            if not message_ids:
                return [], 0
            placeholders = ", ".join("?" for _ in message_ids)
            query += f" AND id IN ({placeholders})"
            params.extend(str(m) for m in message_ids)
        if status:
            query += " AND status = ?"
            params.append(status)
        if purpose:
            query += " AND purpose = ?"
            params.append(purpose)
        if search and search.strip():
            query += " AND (full_name LIKE ? OR email LIKE ? OR message LIKE ? OR purpose LIKE ?)"
            params.extend([_like(search)] * 4)
        if date_from:
            query += " AND created_at >= ?"
            params.append(_iso(date_from))
        if date_to:
            query += " AND created_at <= ?"
            params.append(_iso(date_to))
        if has_attachments is not None:
            exists = (
                "EXISTS (SELECT 1 FROM contact_attachments a"
                " WHERE a.message_id = contact_messages.id)"
            )
            query += f" AND {exists}" if has_attachments else f" AND NOT {exists}"

        order = _order_clause(sort_by, sort_order, self.SORT_FIELDS, "created_at")
        rows, total = self._paged(query, params, order, limit, offset)
        return [self._map(r) for r in rows], total

    def count(self, *, status: str | None = None) -> int:
        if status is None:
            row = self._fetch_one("SELECT COUNT(*) AS cnt FROM contact_messages", ())
        else:
            row = self._fetch_one(
                "SELECT COUNT(*) AS cnt FROM contact_messages WHERE status = ?", (status,)
            )
        return row["cnt"] if row else 0


class SQLiteLogRepo(_SQLiteRepo):
    def _map(self, row: dict[str, Any]) -> LogEntry:
        return LogEntry(
            id=UUID(row["id"]),
            type=row["type"],
            action=row["action"],
            details=json.loads(row["details_json"]),
            user_id=row["user_id"],
            user_email=row["user_email"],
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
            created_at=_parse_dt(row["created_at"]),
        )

    def save(self, entry: LogEntry) -> LogEntry:
        self._write(
            """
            INSERT INTO application_logs (
                id, type, action, details_json, user_id, user_email,
                ip_address, user_agent, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(entry.id),
                entry.type,
                entry.action,
                json.dumps(entry.details, default=str),
                entry.user_id,
                entry.user_email,
                entry.ip_address,
                entry.user_agent,
                _iso(entry.created_at),
            ),
        )
        return entry

    def list(
        self,
        *,
        log_type: str | None = None,
        action: str | None = None,
        user_email: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[builtins.list[LogEntry], int]:
        query = "SELECT * FROM application_logs WHERE 1=1"
        params: builtins.list[Any] = []

        if log_type:
            query += " AND type = ?"
            params.append(log_type)
        if action:
            query += " AND action = ?"
            params.append(action)
        if user_email:
            query += " AND user_email = ?"
            params.append(user_email)
        if date_from:
            query += " AND created_at >= ?"
            params.append(_iso(date_from))
        if date_to:
            query += " AND created_at <= ?"
            params.append(_iso(date_to))

        rows, total = self._paged(query, params, " ORDER BY created_at DESC", limit, offset)
        return [self._map(r) for r in rows], total

    def count_by_type(self) -> dict[str, int]:
        rows = self._fetch_all(
            "SELECT type, COUNT(*) AS cnt FROM application_logs GROUP BY type", ()
        )
        return {r["type"]: r["cnt"] for r in rows}

    def delete_older_than(self, cutoff: datetime) -> int:
        return self._write("DELETE FROM application_logs WHERE created_at < ?", (_iso(cutoff),))
