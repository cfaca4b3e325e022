"""
Record actions beyond create/edit/delete.

Some screens need one-click operations on a single record: registering a
visitor's exit, moving a PQRS along its status track, paying a pending
payment. Each is a POST to /app/<feature>/<record_id>/<action> gated by one
permission flag, rendered as a small inline form in the record's row.
"""

from collections import namedtuple
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

# name: form field; label: placeholder and error text; cast: value converter
ActionInput = namedtuple('ActionInput', ['name', 'label', 'cast', 'required'])


def _input(name, label, cast=str, required=True):
    return ActionInput(name, label, cast, required)


def _always(record):
    return True


@dataclass(frozen=True)
class RecordAction:
    """
    One resource-specific operation on a record.

    run(api, record_id, values) performs the call; values holds the cast
    form inputs. hidden names record fields copied into hidden inputs, so
    the action can read them back from the form.
    """

    name: str
    label: str
    run: Callable[[Any, str, Dict[str, Any]], Any]
    success: str
    failure: str
    permission: str = 'can_edit'
    inputs: Tuple[ActionInput, ...] = ()
    hidden: Tuple[str, ...] = ()
    available: Callable[[Dict[str, Any]], bool] = _always

    @property
    def audit_name(self) -> str:
        return self.name.upper()

    def read_form(self, form) -> Dict[str, Any]:
        """
        Cast the submitted inputs.

        Raises:
            ValueError: If a required input is blank or fails to convert
        """
        values = {}
        for name in self.hidden:
            raw = (form.get(name) or '').strip()
            if not raw:
                raise ValueError(f"Missing {name} for this record")
            values[name] = raw

        for field in self.inputs:
            raw = (form.get(field.name) or '').strip()
            if not raw:
                if field.required:
                    raise ValueError(f"{field.label} is required")
                continue
            try:
                values[field.name] = field.cast(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {field.label}: {raw!r}")
        return values


def _pay(api, record_id, values):
    data = api.schema.to_backend({'method': values['method']}) if 'method' in values else {}
    return api.pay(values['owner_id'], record_id, data)


def _pqrs_status(api, record_id, values):
    return api.update_status(record_id, {
        'status_id': values['status_id'],
        'admin_response': values.get('admin_response', ''),
    })


RECORD_ACTIONS: Dict[str, Tuple[RecordAction, ...]] = {
    'visitors': (
        RecordAction(
            'exit', 'Registrar salida',
            run=lambda api, record_id, values: api.register_exit(record_id),
            success='Exit registered',
            failure='Unable to register the exit',
            available=lambda record: not record.get('exit_date'),
        ),
    ),
    'pqrs': (
        RecordAction(
            'status', 'Actualizar estado',
            run=_pqrs_status,
            success='Status updated',
            failure='Unable to update the status',
            inputs=(_input('status_id', 'Estado', int),
                    _input('admin_response', 'Respuesta', required=False)),
        ),
    ),
    'payments': (
        RecordAction(
            'pay', 'Pagar',
            run=_pay,
            success='Payment registered',
            failure='Unable to register the payment',
            inputs=(_input('method', 'Método', required=False),),
            hidden=('owner_id',),
            available=lambda record: record.get('owner_id') not in (None, ''),
        ),
    ),
    'apartments': (
        RecordAction(
            'status', 'Cambiar estado',
            run=lambda api, record_id, values: api.set_status(record_id, values['status_id']),
            success='Status updated',
            failure='Unable to update the status',
            inputs=(_input('status_id', 'Estado', int),),
        ),
    ),
    'facilities': (
        RecordAction(
            'status', 'Cambiar estado',
            run=lambda api, record_id, values: api.update_status(record_id, values['status']),
            success='Status updated',
            failure='Unable to update the status',
            inputs=(_input('status', 'Estado'),),
        ),
    ),
    'parking': (
        RecordAction(
            'assign', 'Asignar vehículo',
            run=lambda api, record_id, values: api.assign_vehicle(record_id, values['vehicle_type_id']),
            success='Vehicle assigned',
            failure='Unable to assign the vehicle',
            inputs=(_input('vehicle_type_id', 'Tipo de vehículo', int),),
        ),
    ),
}


def get_action(resource, name) -> Optional[RecordAction]:
    """The named action of a resource, or None."""
    for action in RECORD_ACTIONS.get(resource, ()):
        if action.name == name:
            return action
    return None


def allowed_actions(resource, can):
    """Actions of a resource the permission set allows."""
    return [action for action in RECORD_ACTIONS.get(resource, ()) if getattr(can, action.permission)]
