"""
Per-resource record schemas.

Canonical field names are snake_case; ALIASES lists the spellings the
backend has been seen to use for each of them.
"""

from marshmallow import fields, pre_load

from . import RecordSchema


class TowerSchema(RecordSchema):
    name = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Tower_id', 'tower_id'),
        'name': ('Tower_name', 'tower_name'),
    }


class ApartmentSchema(RecordSchema):
    number = fields.Raw(allow_none=True)
    tower = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)
    owner_id = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Apartment_id', 'apartment_id'),
        'number': ('Apartment_number', 'apartment_number'),
        'tower': ('Tower_name', 'tower_name'),
        'status': ('Apartment_status_name', 'apartment_status_name', 'status_name'),
        'owner_id': ('Owner_FK_ID', 'Owner_id', 'owner_id'),
    }


class OwnerSchema(RecordSchema):
    first_name = fields.Raw(allow_none=True)
    last_name = fields.Raw(allow_none=True)
    username = fields.Raw(allow_none=True)
    email = fields.Raw(allow_none=True)
    phone = fields.Raw(allow_none=True)
    document_number = fields.Raw(allow_none=True)
    is_tenant = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Owner_id', 'owner_id'),
        'first_name': ('Owner_first_name', 'Profile_first_name', 'firstName'),
        'last_name': ('Owner_last_name', 'Profile_last_name', 'lastName'),
        'username': ('Users_name', 'user_name'),
        'email': ('Owner_email', 'Users_email', 'user_email'),
        'phone': ('Owner_phone', 'Profile_telephone_number', 'phone_number'),
        'document_number': ('Profile_document_number', 'document'),
        'is_tenant': ('Owner_is_tenant', 'isTenant'),
        'status': ('User_status_name', 'user_status'),
    }


class GuardSchema(RecordSchema):
    full_name = fields.Raw(allow_none=True)
    document_number = fields.Raw(allow_none=True)
    shift = fields.Raw(allow_none=True)
    arl = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Guard_id', 'guard_id'),
        'full_name': ('fullName', 'Profile_fullName', 'Guard_full_name', 'name'),
        'document_number': ('Profile_document_number', 'documentNumber'),
        'shift': ('Guard_shift', 'guard_shift'),
        'arl': ('Guard_arl', 'guard_arl'),
    }


class PaymentSchema(RecordSchema):
    reference = fields.Raw(allow_none=True)
    total = fields.Raw(allow_none=True)
    method = fields.Raw(allow_none=True)
    date = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)
    owner_id = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Payment_id', 'payment_id'),
        'reference': ('Payment_reference_number', 'reference_number'),
        'total': ('Payment_total_payment', 'total_payment', 'amount'),
        'method': ('Payment_method', 'payment_method'),
        'date': ('Payment_date', 'payment_date'),
        'status': ('Payment_status_name', 'Payment_status', 'payment_status'),
        'owner_id': ('Owner_FK_ID', 'Owner_id', 'owner_id'),
    }


class PQRSSchema(RecordSchema):
    subject = fields.Raw(allow_none=True)
    description = fields.Raw(allow_none=True)
    priority = fields.Raw(allow_none=True)
    category = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)
    owner_id = fields.Raw(allow_none=True)
    created_at = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('PQRS_id', 'pqrs_id'),
        'subject': ('PQRS_subject', 'pqrs_subject'),
        'description': ('PQRS_description', 'pqrs_description'),
        'priority': ('PQRS_priority', 'pqrs_priority'),
        'category': ('PQRS_category_name', 'category_name'),
        'status': ('PQRS_tracking_status_name', 'status_name', 'current_status'),
        'owner_id': ('Owner_FK_ID', 'owner_id'),
        'created_at': ('PQRS_createdAt', 'createdAt'),
    }


class ReservationSchema(RecordSchema):
    type = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)
    start_time = fields.Raw(allow_none=True)
    end_time = fields.Raw(allow_none=True)
    owner_id = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Reservation_id', 'reservation_id'),
        'type': ('Reservation_type_name', 'reservation_type'),
        'status': ('Reservation_status_name', 'reservation_status'),
        'start_time': ('Reservation_start_time', 'startTime'),
        'end_time': ('Reservation_end_time', 'endTime'),
        'owner_id': ('Owner_FK_ID', 'owner_id'),
    }


class PetSchema(RecordSchema):
    name = fields.Raw(allow_none=True)
    species = fields.Raw(allow_none=True)
    breed = fields.Raw(allow_none=True)
    owner_id = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Pet_id', 'pet_id'),
        'name': ('Pet_name', 'pet_name'),
        'species': ('Pet_species', 'pet_species'),
        'breed': ('Pet_Breed', 'Pet_breed', 'pet_breed'),
        'owner_id': ('Owner_FK_ID', 'owner_id'),
    }


class ParkingSchema(RecordSchema):
    number = fields.Raw(allow_none=True)
    type = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)
    vehicle_type = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Parking_id', 'parking_id'),
        'number': ('Parking_number', 'parking_number'),
        'type': ('Parking_type_name', 'parking_type'),
        'status': ('Parking_status_name', 'parking_status'),
        'vehicle_type': ('Vehicle_type_name', 'vehicle_type_name'),
    }


class VisitorSchema(RecordSchema):
    name = fields.Raw(allow_none=True)
    host_id = fields.Raw(allow_none=True)
    host_name = fields.Raw(allow_none=True)
    enter_date = fields.Raw(allow_none=True)
    exit_date = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('ViSitors_id', 'Visitor_id', 'visitor_id'),
        'name': ('visitor_name', 'visitorName', 'Visitor_name'),
        'host_id': ('host', 'hostId', 'Host_id'),
        'host_name': ('hostName', 'Host_name'),
        'enter_date': ('ViSitors_enter_date', 'enter_date', 'enterDate'),
        'exit_date': ('ViSitors_exit_date', 'exit_date', 'exitDate'),
    }


class FacilitySchema(RecordSchema):
    name = fields.Raw(allow_none=True)
    description = fields.Raw(allow_none=True)
    capacity = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Facility_id', 'facility_id'),
        'name': ('Facility_name', 'facility_name'),
        'description': ('Facility_description', 'facility_description'),
        'capacity': ('Facility_capacity', 'facility_capacity'),
        'status': ('Facility_status', 'facility_status'),
    }


class NotificationSchema(RecordSchema):
    description = fields.Raw(allow_none=True)
    type = fields.Raw(allow_none=True)
    user_id = fields.Raw(allow_none=True)
    created_at = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Notification_id', 'notification_id'),
        'description': ('Notification_description', 'message'),
        'type': ('Notification_type_name', 'type_name', 'Notification_type_FK_ID'),
        'user_id': ('Notification_User_FK_ID', 'userId'),
        'created_at': ('Notification_createdAt', 'createdAt'),
    }


class SurveySchema(RecordSchema):
    title = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('survey_id', 'Survey_id'),
        'title': ('Survey_title', 'survey_title', 'name'),
        'status': ('Survey_status', 'survey_status'),
    }


class RoleSchema(RecordSchema):
    name = fields.Raw(allow_none=True)
    description = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Role_id', 'role_id'),
        'name': ('Role_name', 'role_name'),
        'description': ('Role_description', 'role_description'),
    }


class PermissionSchema(RecordSchema):
    name = fields.Raw(allow_none=True)
    description = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Permissions_id', 'Permission_id', 'permission_id'),
        'name': ('Permissions_name', 'Permission_name', 'permission_name'),
        'description': ('Permissions_description', 'permission_description'),
    }


class UserSchema(RecordSchema):
    username = fields.Raw(allow_none=True)
    email = fields.Raw(allow_none=True)
    role_id = fields.Raw(allow_none=True)
    status = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('Users_id', 'User_id', 'user_id', 'userId'),
        'username': ('Users_name', 'user_name', 'name'),
        'email': ('Users_email', 'user_email'),
        'role_id': ('Role_FK_ID', 'roleId'),
        'status': ('User_status_name', 'user_status'),
    }


class LookupSchema(RecordSchema):
    """Generic id/name lookup tables (statuses, types, categories)."""
    name = fields.Raw(allow_none=True)

    ALIASES = {
        'id': ('value',),
        'name': ('label', 'description'),
    }

    @pre_load
    def map_suffixes(self, data, **kwargs):
        # lookup tables spell their keys <Table>_id / <Table>_name
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for canonical, suffix in (('id', '_id'), ('name', '_name')):
            if data.get(canonical) not in (None, ''):
                continue
            for key, value in data.items():
                if key.lower().endswith(suffix) and value not in (None, ''):
                    data[canonical] = value
                    break
        return data

    def to_backend(self, data):
        return dict(data)


SCHEMAS = {
    'towers': TowerSchema,
    'apartments': ApartmentSchema,
    'owners': OwnerSchema,
    'guards': GuardSchema,
    'payments': PaymentSchema,
    'pqrs': PQRSSchema,
    'reservations': ReservationSchema,
    'pets': PetSchema,
    'parking': ParkingSchema,
    'visitors': VisitorSchema,
    'facilities': FacilitySchema,
    'notifications': NotificationSchema,
    'surveys': SurveySchema,
    'roles': RoleSchema,
    'permissions': PermissionSchema,
    'users': UserSchema,
}


def schema_for(resource: str, many: bool = False) -> RecordSchema:
    """Schema instance for a resource; LookupSchema when none is registered."""
    return SCHEMAS.get(resource, LookupSchema)(many=many)
