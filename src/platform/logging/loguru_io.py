from collections.abc import Awaitable
from functools import wraps
from inspect import iscoroutinefunction
import types
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar, cast, overload


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io_config import (
    ExtraField,
    call_depth_var,
    custom_logger,
)
from src.platform.logging.loguru_io_utils import (
    build_call_target_func_path,
    get_chain_start_time,
    mask_payload,
    normalize_args_kwargs,
    reset_call_depth,
    truncate_content,
)

_F = TypeVar('_F', bound=Callable[..., Any])

# wrapper -> LoguruIO method -> logger call
_FRAME_DEPTH = 2


class LoguruIO:
    """
    Decorator logging a call's arguments and return value at DEBUG, and its
    failure once per exception.

    Domain errors (CustomBaseError) are expected outcomes: logged at ERROR with
    their code, no traceback. Anything else is logged with the traceback.
    """

    def __init__(
        self, target: 'LoguruLogger', *, reraise: bool = True, truncate: bool = False
    ) -> None:
        self._target = target
        self.reraise = reraise
        self.truncate = truncate
        self.extra: dict[str, Any] = {}

    def _render(self, data: Any) -> Any:
        masked = mask_payload(data)
        return truncate_content(masked) if self.truncate else masked

    def _bound(self, *, extra_depth: int = 0) -> 'LoguruLogger':
        return self._target.bind(**self.extra).opt(depth=_FRAME_DEPTH + extra_depth)

    def on_enter(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        call_depth_var.set(call_depth_var.get() + 1)
        self.extra[ExtraField.CHAIN_START_TIME] = get_chain_start_time()
        if settings.DEBUG:
            self._bound().debug(f'args: {self._render(args)}, kwargs: {self._render(kwargs)}')

    def on_return(self, value: Any) -> None:
        if settings.DEBUG:
            self._bound().debug(f'return: {self._render(value)}')

    def on_error(self, error: Exception) -> None:
        # Nested @Logger.io frames see the same exception; log it at the innermost only
        if getattr(error, '_has_logged', False):
            return
        error._has_logged = True  # type: ignore[attr-defined]
        if isinstance(error, CustomBaseError):
            self._bound(extra_depth=1).error(f'{type(error).__name__}[{error.code}]: {error}')
        else:
            self._bound(extra_depth=1).exception(f'{type(error).__name__}: {error}')

    def _hide_from_traceback(self, func: Callable[..., Any]) -> Callable[..., Any]:
        func.__code__ = func.__code__.replace(  # type: ignore[attr-defined]
            co_filename=cast(types.FunctionType, self._target.catch).__code__.co_filename
        )
        return func

    def __call__(self, func: _F) -> _F:
        self.extra[ExtraField.CALL_TARGET] = build_call_target_func_path(func)

        if iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                self.on_enter(args, kwargs)
                try:
                    args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                    value = await cast(Awaitable[Any], func(*args, **kwargs))
                except Exception as e:
                    self.on_error(e)
                    if self.reraise:
                        raise
                    return None
                finally:
                    reset_call_depth()
                self.on_return(value)
                return value

            return cast(_F, self._hide_from_traceback(async_wrapper))

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            self.on_enter(args, kwargs)
            try:
                args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                value = func(*args, **kwargs)
            except Exception as e:
                self.on_error(e)
                if self.reraise:
                    raise
                return None
            finally:
                reset_call_depth()
            self.on_return(value)
            return value

        return cast(_F, self._hide_from_traceback(sync_wrapper))


_P = ParamSpec('_P')
_T = TypeVar('_T')


class Logger:
    base = custom_logger

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        decorator = LoguruIO(custom_logger, reraise=reraise, truncate=truncate)
        return decorator(func) if func else decorator
