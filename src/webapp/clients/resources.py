"""
Per-resource API clients.

ResourceAPI covers the CRUD endpoints every backend resource shares and
returns records normalized through the resource's schema. Subclasses add
the resource-specific endpoints.
"""

from collections import namedtuple
from typing import Any, Dict, List, Optional, Sequence

from webapp.clients.valhalla_api import ValhallaAPIClient
from webapp.schemas import extract_items, extract_record, normalize_records, schema_for


class ResourceAPI:
    """
    Generic CRUD client for one backend resource.

    Args:
        client: Shared ValhallaAPIClient
        name: Resource name (key into RESOURCES and the schema table)
        path: Backend path, e.g. '/towers'
        keys: Envelope keys the list/record may be wrapped under
    """

    def __init__(self, client: ValhallaAPIClient, name: str, path: str, keys: Sequence[str] = ()):
        self.client = client
        self.name = name
        self.path = '/' + path.strip('/')
        self.keys = tuple(keys)
        self.schema = schema_for(name)

    def _records(self, payload) -> List[Dict[str, Any]]:
        return normalize_records(extract_items(payload, self.keys), self.schema)

    def _record(self, payload) -> Optional[Dict[str, Any]]:
        key = self.keys[0] if self.keys else None
        record = extract_record(payload, key)
        if record is None:
            return None
        normalized = normalize_records([record], self.schema)
        return normalized[0] if normalized else None

    def _sub(self, *parts) -> str:
        return '/'.join([self.path] + [str(part).strip('/') for part in parts])

    def list(self, params=None) -> List[Dict[str, Any]]:
        return self._records(self.client.get(self.path, params=params))

    def get(self, record_id) -> Optional[Dict[str, Any]]:
        return self._record(self.client.get(self._sub(record_id)))

    def create(self, data: Dict[str, Any]):
        return self.client.post(self.path, json=data)

    def update(self, record_id, data: Dict[str, Any]):
        return self.client.put(self._sub(record_id), json=data)

    def delete(self, record_id):
        return self.client.delete(self._sub(record_id))


class ApartmentsAPI(ResourceAPI):

    def set_status(self, apartment_id, status_id):
        return self.client.patch(self._sub(apartment_id, 'status'), json={'status_id': status_id})


class PaymentsAPI(ResourceAPI):

    def pay(self, owner_id, payment_id, data=None):
        return self.client.post(self._sub('owner', owner_id, 'pay', payment_id), json=data or {})


class PQRSAPI(ResourceAPI):

    def update_status(self, pqrs_id, data):
        return self.client.put(self._sub(pqrs_id, 'status'), json=data)


class VisitorsAPI(ResourceAPI):

    def register_exit(self, visitor_id):
        return self.client.put(self._sub(visitor_id, 'exit'))


class FacilitiesAPI(ResourceAPI):

    def update_status(self, facility_id, status):
        return self.client.put(self._sub(facility_id, 'status'), json={'status': status})


class ParkingAPI(ResourceAPI):

    def assign_vehicle(self, parking_id, vehicle_type_id):
        return self.client.post(self._sub('assign-vehicle'),
                                json={'parkingId': parking_id, 'vehicleTypeId': vehicle_type_id})


ResourceSpec = namedtuple('ResourceSpec', ['path', 'api_class', 'keys', 'columns'])

# name -> backend path, client class, envelope keys, table columns (field, header)
RESOURCES: Dict[str, ResourceSpec] = {
    'apartments': ResourceSpec('/apartments', ApartmentsAPI, ('apartments',),
                               (('number', 'Número'), ('tower', 'Torre'), ('status', 'Estado'))),
    'towers': ResourceSpec('/towers', ResourceAPI, ('towers',),
                           (('name', 'Nombre'),)),
    'owners': ResourceSpec('/owners', ResourceAPI, ('owners',),
                           (('first_name', 'Nombre'), ('last_name', 'Apellido'),
                            ('email', 'Correo'), ('phone', 'Teléfono'))),
    'guards': ResourceSpec('/guards', ResourceAPI, ('guards',),
                           (('full_name', 'Nombre'), ('document_number', 'Documento'),
                            ('shift', 'Turno'))),
    'payments': ResourceSpec('/payment', PaymentsAPI, ('payments',),
                             (('reference', 'Referencia'), ('total', 'Total'),
                              ('method', 'Método'), ('date', 'Fecha'), ('status', 'Estado'))),
    'pqrs': ResourceSpec('/pqrs', PQRSAPI, ('pqrs',),
                         (('subject', 'Asunto'), ('category', 'Categoría'),
                          ('priority', 'Prioridad'), ('status', 'Estado'))),
    'reservations': ResourceSpec('/reservations', ResourceAPI, ('reservations',),
                                 (('type', 'Tipo'), ('start_time', 'Inicio'),
                                  ('end_time', 'Fin'), ('status', 'Estado'))),
    'notifications': ResourceSpec('/notifications', ResourceAPI, ('notifications',),
                                  (('description', 'Descripción'), ('type', 'Tipo'),
                                   ('created_at', 'Fecha'))),
    'visitors': ResourceSpec('/visitors', VisitorsAPI, ('visitors',),
                             (('name', 'Nombre'), ('host_name', 'Anfitrión'),
                              ('enter_date', 'Ingreso'), ('exit_date', 'Salida'))),
    'facilities': ResourceSpec('/facilities', FacilitiesAPI, ('facilities',),
                               (('name', 'Nombre'), ('capacity', 'Capacidad'), ('status', 'Estado'))),
    'parking': ResourceSpec('/parking', ParkingAPI, ('parking', 'parkings'),
                            (('number', 'Número'), ('type', 'Tipo'),
                             ('vehicle_type', 'Vehículo'), ('status', 'Estado'))),
    'pets': ResourceSpec('/pets', ResourceAPI, ('pets',),
                         (('name', 'Nombre'), ('species', 'Especie'), ('breed', 'Raza'))),
    'surveys': ResourceSpec('/surveys', ResourceAPI, ('surveys',),
                            (('title', 'Título'), ('status', 'Estado'))),
    'roles': ResourceSpec('/roles', ResourceAPI, ('roles',),
                          (('name', 'Nombre'), ('description', 'Descripción'))),
    'permissions': ResourceSpec('/permissions', ResourceAPI, ('permissions',),
                                (('name', 'Nombre'), ('description', 'Descripción'))),
    'users': ResourceSpec('/users', ResourceAPI, ('users',),
                          (('username', 'Usuario'), ('email', 'Correo'))),
    'apartment-status': ResourceSpec('/apartment-status', ResourceAPI, ('apartmentStatus', 'statuses'),
                                     (('name', 'Nombre'),)),
    'vehicle-types': ResourceSpec('/vehicle-types', ResourceAPI, ('vehicleTypes',),
                                  (('name', 'Nombre'),)),
    'pqrs-categories': ResourceSpec('/pqrs-categories', ResourceAPI, ('categories',),
                                    (('name', 'Nombre'),)),
    'reservation-types': ResourceSpec('/reservation-types', ResourceAPI, ('reservationTypes',),
                                      (('name', 'Nombre'),)),
    'reservation-status': ResourceSpec('/reservation-status', ResourceAPI, ('reservationStatus',),
                                       (('name', 'Nombre'),)),
}


def get_resource_api(client: ValhallaAPIClient, name: str) -> ResourceAPI:
    """
    Build the client for a registered resource.

    Raises:
        KeyError: If the resource is not registered
    """
    spec = RESOURCES[name]
    return spec.api_class(client, name, spec.path, spec.keys)
