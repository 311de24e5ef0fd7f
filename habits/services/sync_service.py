"""
Sync Service - Offline edit queue and bidirectional sync.

Clients that lose connectivity queue their edits as typed operations and
replay them when back online. The server applies each operation through
HabitService and returns what changed since the client's last sync.

Conflict resolution: last-write-wins. A day edit made offline before the
server's copy of that week log was last written is rejected as a conflict.
"""
from datetime import datetime, timezone as dt_timezone
from typing import Dict, List, Optional
import logging
import time
import uuid

from dateutil import parser as date_parser
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone

from habits.exceptions import (
    HabitException,
    SyncOperationError,
    ValidationError as AppValidationError,
)
from habits.serializers import (
    CreateHabitPayloadSerializer,
    DeleteHabitPayloadSerializer,
    SyncOperationSerializer,
    SyncRequestSerializer,
    ToggleDayPayloadSerializer,
    UpdateDayHoursPayloadSerializer,
    UpdateHabitPayloadSerializer,
    validate_or_raise,
)
from habits.services.habit_service import HabitService, get_user_timezone
from habits.utils.constants import (
    OP_CREATE_HABIT,
    OP_DELETE_HABIT,
    OP_TOGGLE_DAY,
    OP_UPDATE_DAY_HOURS,
    OP_UPDATE_HABIT,
    SYNC_OPERATION_CHOICES,
    get_setting,
)
from habits.utils.time_utils import get_user_today, get_week_id_list

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


# ============================================================================
# OFFLINE OPERATION QUEUE
# ============================================================================

class OfflineQueue:
    """
    Per-user, per-device queue of pending operations, kept in the cache.

    Each operation is {id, type, payload, timestamp, retries}; `timestamp`
    is epoch milliseconds of the original edit.

    Usage:
        queue = OfflineQueue(user, device_id='web-1')
        queue.enqueue('toggleDay', {'habitId': ..., 'weekId': '2026-W08', 'dayIndex': 2})
        queue.replay(SyncService(user))
    """

    def __init__(self, user, device_id: str = 'default'):
        self.user = user
        self.device_id = device_id
        self.key = f"sync_queue:{user.id}:{device_id}"

    def pending(self) -> List[Dict]:
        return list(cache.get(self.key) or [])

    def _save(self, queue: List[Dict]):
        cache.set(self.key, queue, None)

    def enqueue(self, op_type: str, payload: Dict, timestamp: Optional[int] = None) -> Dict:
        """Append an operation and return it."""
        if op_type not in SYNC_OPERATION_CHOICES:
            raise SyncOperationError(op_type, "Unknown operation type")

        timestamp = timestamp if timestamp is not None else _now_ms()
        operation = {
            'id': f"op-{timestamp}-{uuid.uuid4().hex[:10]}",
            'type': op_type,
            'payload': dict(payload),
            'timestamp': timestamp,
            'retries': 0,
        }
        queue = self.pending()
        queue.append(operation)
        self._save(queue)
        return operation

    def remove(self, operation_id: str):
        self._save([op for op in self.pending() if op['id'] != operation_id])

    def increment_retry(self, operation_id: str) -> bool:
        """
        Count a failed attempt. Returns False when the operation is unknown or
        has now used up its retries, in which case it is dropped for good.
        """
        queue = self.pending()
        operation = next((op for op in queue if op['id'] == operation_id), None)
        if operation is None:
            return False

        operation['retries'] += 1
        if operation['retries'] >= get_setting('MAX_SYNC_RETRIES'):
            self._save([op for op in queue if op['id'] != operation_id])
            logger.warning("Dropped operation %s after %d retries", operation_id, operation['retries'])
            return False

        self._save(queue)
        return True

    def clear(self):
        cache.delete(self.key)

    def replay(self, sync_service: 'SyncService') -> List[Dict]:
        """
        Apply every pending operation in order. Applied and non-retryable
        operations leave the queue; retryable failures count a retry.
        """
        results = []
        for operation in self.pending():
            result = sync_service.apply_operation(operation)
            results.append(result)
            if result['success'] or not result.get('retry'):
                self.remove(operation['id'])
            else:
                self.increment_retry(operation['id'])
        return results


# ============================================================================
# OFFLINE WEEK CACHE
# ============================================================================

def _week_cache_key(user_id) -> str:
    return f"offline_weeks:{user_id}"


def cache_week_snapshot(user_id, week_id: str, data, cached_at: Optional[int] = None):
    """
    Remember the last loaded data of a week for offline reading. Only the
    most recent weeks (by week id) are kept.
    """
    stored = dict(cache.get(_week_cache_key(user_id)) or {})
    stored[week_id] = {
        'data': data,
        'cachedAt': cached_at if cached_at is not None else _now_ms(),
    }

    keep = get_setting('OFFLINE_CACHE_WEEKS')
    for stale in sorted(stored, reverse=True)[keep:]:
        del stored[stale]

    cache.set(_week_cache_key(user_id), stored, None)


def get_cached_week(user_id, week_id: str):
    """Cached data of a week, or None."""
    entry = (cache.get(_week_cache_key(user_id)) or {}).get(week_id)
    return entry['data'] if entry else None


def get_cached_week_ids(user_id) -> List[str]:
    return sorted(cache.get(_week_cache_key(user_id)) or {}, reverse=True)


# ============================================================================
# SYNC
# ============================================================================

class SyncService:
    """
    Handle offline operation processing and bidirectional sync.

    Usage:
        sync_service = SyncService(request.user)
        result = sync_service.process_sync_request({
            'last_sync': '2026-02-16T10:00:00Z',
            'pending_actions': [...],
            'device_id': 'web-abc123'
        })
    """

    PAYLOAD_SERIALIZERS = {
        OP_TOGGLE_DAY: ToggleDayPayloadSerializer,
        OP_UPDATE_DAY_HOURS: UpdateDayHoursPayloadSerializer,
        OP_CREATE_HABIT: CreateHabitPayloadSerializer,
        OP_UPDATE_HABIT: UpdateHabitPayloadSerializer,
        OP_DELETE_HABIT: DeleteHabitPayloadSerializer,
    }

    def __init__(self, user):
        self.user = user
        self.habits = HabitService(user)

    def process_sync_request(self, data: Dict) -> Dict:
        """
        Process a bidirectional sync request.

        Args:
            data: {
                'last_sync': ISO timestamp (optional),
                'pending_actions': List of queued operations,
                'device_id': Device identifier
            }

        Returns:
            {
                'action_results': Results for each pending operation,
                'server_changes': Changes since last sync (full snapshot without one),
                'new_sync_timestamp': Timestamp for the next sync,
                'sync_status': 'complete' or 'partial',
                'device_id': Echoed device id
            }
        """
        validated = validate_or_raise(SyncRequestSerializer, data)
        sync_started = timezone.now()
        last_sync = self._parse_last_sync(validated.get('last_sync'))

        action_results = [self.apply_operation(op) for op in validated['pending_actions']]

        if last_sync is not None:
            changes = self.habits.get_changes_since(last_sync)
        else:
            changes = self.habits.get_changes_since(None, week_ids=self._recent_week_ids())

        failed = sum(1 for r in action_results if not r['success'])
        logger.info(
            "Sync for user %s from %s: %d actions, %d failed",
            self.user.id, validated['device_id'], len(action_results), failed,
        )

        return {
            'action_results': action_results,
            'server_changes': changes,
            'new_sync_timestamp': sync_started.isoformat(),
            'sync_status': 'complete' if failed == 0 else 'partial',
            'device_id': validated['device_id'],
        }

    def _parse_last_sync(self, value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            parsed = date_parser.isoparse(value)
        except ValueError:
            raise AppValidationError('last_sync', f"Invalid timestamp: {value}")
        if timezone.is_naive(parsed):
            parsed = parsed.replace(tzinfo=dt_timezone.utc)
        return parsed

    def _recent_week_ids(self) -> List[str]:
        """Weeks covered by a full snapshot: the offline cache window up to this week."""
        today = get_user_today(get_user_timezone(self.user))
        return get_week_id_list(today, past_weeks=get_setting('OFFLINE_CACHE_WEEKS') - 1, future_weeks=0)

    def apply_operation(self, operation: Dict) -> Dict:
        """
        Apply one queued operation.

        Returns:
            {'id', 'type', 'success': True, 'result'} or
            {'id', 'type', 'success': False, 'error', 'retry'[, 'conflict']}.
            Validation, not-found and conflict failures are not retryable.
        """
        op_id = operation.get('id', 'unknown') if isinstance(operation, dict) else 'unknown'
        op_type = operation.get('type') if isinstance(operation, dict) else None

        try:
            op = validate_or_raise(SyncOperationSerializer, operation)
            payload = validate_or_raise(self.PAYLOAD_SERIALIZERS[op['type']], op['payload'])

            with transaction.atomic():
                conflict = self._check_conflict(op, payload)
                if conflict:
                    return {'id': op_id, 'type': op_type, **conflict}
                result = self._dispatch(op['type'], payload)

            return {'id': op_id, 'type': op_type, 'success': True, 'result': result}

        except HabitException as e:
            return {'id': op_id, 'type': op_type, 'success': False, 'error': str(e), 'retry': False}

        except Exception as e:
            logger.warning("Sync operation %s (%s) failed", op_id, op_type, exc_info=True)
            return {'id': op_id, 'type': op_type, 'success': False, 'error': str(e), 'retry': True}

    def _check_conflict(self, op: Dict, payload: Dict) -> Optional[Dict]:
        """Reject a day edit older than the server's last write of that week log."""
        if op['type'] not in (OP_TOGGLE_DAY, OP_UPDATE_DAY_HOURS) or op.get('timestamp') is None:
            return None

        server_updated = self.habits.get_week_log_updated_at(payload['habit_id'], payload['week_id'])
        if server_updated is None:
            return None

        server_ms = int(server_updated.timestamp() * 1000)
        if server_ms <= op['timestamp']:
            return None

        return {
            'success': False,
            'conflict': True,
            'server_timestamp': server_updated.isoformat(),
            'error': 'Conflict: week log was changed on the server after this edit',
            'retry': False,
        }

    def _dispatch(self, op_type: str, payload: Dict) -> Dict:
        if op_type == OP_TOGGLE_DAY:
            return self.habits.toggle_day(payload['habit_id'], payload['week_id'], payload['day_index'])

        if op_type == OP_UPDATE_DAY_HOURS:
            return self.habits.update_day_hours(
                payload['habit_id'], payload['week_id'], payload['day_index'], payload['hours']
            )

        if op_type == OP_CREATE_HABIT:
            habit_id = payload.pop('habit_id', None)
            return self.habits.create_habit(payload, habit_id=habit_id)

        if op_type == OP_UPDATE_HABIT:
            habit_id = payload.pop('habit_id')
            return self.habits.update_habit(habit_id, payload)

        if op_type == OP_DELETE_HABIT:
            return self.habits.delete_habit(payload['habit_id'])

        raise SyncOperationError(op_type, "Unknown operation type")


# Convenience function for API use
def process_sync(user, data: Dict) -> Dict:
    """Process sync request for given user"""
    return SyncService(user).process_sync_request(data)
