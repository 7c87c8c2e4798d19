"""
Base Service Classes
====================

Base classes dan utilities untuk semua services
"""

from abc import ABC
from typing import Any, Callable, Awaitable, List
from functools import wraps
import asyncio
import logging
import uuid

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from .exceptions import ValidationError, NotFoundError, InternalError
from ..schemas import PaginationSchema

logger = logging.getLogger(__name__)

DEFAULT_STORE_TIMEOUT = 10.0

def transactional(func):
    """
    Decorator untuk automatic transaction management.

    Commit kalau sukses, rollback kalau ada exception apapun. Callback yang
    didaftarkan lewat _after_commit (mis. notifikasi) hanya dijalankan setelah
    commit berhasil.
    """
    @wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            result = await func(self, *args, **kwargs)
            await self._commit()
        except Exception as e:
            self._pending_after_commit.clear()
            await self._rollback()
            logger.error(f"Transaction failed in {func.__name__}: {str(e)}")
            raise
        await self._run_after_commit()
        return result
    return wrapper

class BaseService(ABC):
    """Base service class dengan common functionality"""

    def __init__(self, db_session: AsyncSession, current_user: str = None,
                 notification_service=None, store_timeout: float = DEFAULT_STORE_TIMEOUT):
        self.db_session = db_session
        self.current_user = current_user
        self.notification_service = notification_service
        self.store_timeout = store_timeout
        self.logger = logging.getLogger(self.__class__.__name__)
        self._pending_after_commit: List[Callable[[], Awaitable[None]]] = []

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    async def _guard(self, awaitable, operation: str):
        """Jalankan store call dengan timeout; timeout/driver error jadi InternalError"""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.store_timeout)
        except asyncio.TimeoutError:
            self.logger.error(f"Store call '{operation}' timed out after {self.store_timeout}s")
            raise InternalError("The data store did not respond in time")
        except SQLAlchemyError as e:
            self.logger.error(f"Store call '{operation}' failed: {e}")
            raise InternalError("The data store rejected the operation")

    async def _execute(self, statement, operation: str = 'execute'):
        return await self._guard(self.db_session.execute(statement), operation)

    async def _flush(self):
        await self._guard(self.db_session.flush(), 'flush')

    async def _commit(self):
        await self._guard(self.db_session.commit(), 'commit')

    async def _rollback(self):
        try:
            await asyncio.wait_for(self.db_session.rollback(), timeout=self.store_timeout)
        except (asyncio.TimeoutError, SQLAlchemyError) as e:
            self.logger.error(f"Rollback failed: {e}")

    async def _get_or_404(self, model_class, entity_id, resource_type: str = None):
        """Get entity by primary key or raise 404 error"""
        pk = model_class.__mapper__.primary_key[0]
        # populate_existing: bulk UPDATE tidak menyinkronkan identity map
        result = await self._execute(
            select(model_class).where(pk == entity_id).execution_options(populate_existing=True),
            'get'
        )
        entity = result.scalars().first()
        if not entity:
            raise NotFoundError(resource_type or model_class.__name__, entity_id)
        return entity

    async def _paginate_query(self, query, page: int = 1, per_page: int = 20,
                       max_per_page: int = 100):
        """Paginate query results"""
        per_page = min(per_page, max_per_page)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self._execute(count_query, 'count')
        total = total_result.scalar()

        pages = (total + per_page - 1) // per_page if total > 0 else 1
        offset = (page - 1) * per_page
        items_result = await self._execute(query.offset(offset).limit(per_page), 'paginate')
        items = items_result.scalars().all()

        pagination = PaginationSchema(
            page=page,
            per_page=per_page,
            total=total,
            pages=pages,
            has_prev=page > 1,
            has_next=page < pages
        )
        return {'items': items, 'pagination': pagination.model_dump()}

    # ------------------------------------------------------------------
    # Input parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_uuid(value: Any, field: str) -> uuid.UUID:
        """Parse id dari caller; format salah atau kosong -> ValidationError"""
        if isinstance(value, uuid.UUID):
            return value
        if value is None or not str(value).strip():
            raise ValidationError(f"{field} is required", field=field)
        try:
            return uuid.UUID(str(value).strip())
        except ValueError:
            raise ValidationError(f"Invalid {field} format: {value}", field=field)

    @staticmethod
    def _validate_schema(schema_class, data):
        """Validasi dict dengan pydantic schema; error pydantic -> ValidationError"""
        if isinstance(data, schema_class):
            return data
        try:
            return schema_class.model_validate(data)
        except PydanticValidationError as e:
            errors = e.errors()
            first = errors[0] if errors else {}
            field = '.'.join(str(part) for part in first.get('loc', ())) or None
            raise ValidationError(
                first.get('msg', 'Invalid input'),
                field=field,
                details={'errors': [
                    {'field': '.'.join(str(p) for p in err.get('loc', ())), 'message': err.get('msg')}
                    for err in errors
                ]}
            )

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _after_commit(self, callback: Callable[[], Awaitable[None]]):
        """Daftarkan side effect yang hanya jalan kalau transaksi berhasil commit"""
        self._pending_after_commit.append(callback)

    async def _run_after_commit(self):
        callbacks, self._pending_after_commit = self._pending_after_commit, []
        for callback in callbacks:
            try:
                await callback()
            except Exception as e:
                # Side effect tidak boleh membatalkan mutasi yang sudah commit
                self.logger.warning(f"Post-commit side effect failed: {str(e)}")

