from sqladmin import ModelView

from neighborwatch.area.models import AreaOfInterest
from neighborwatch.chat.models import FoundObjectChat
from neighborwatch.device.models import Device
from neighborwatch.event.models import Event
from neighborwatch.group.models import Group
from neighborwatch.user.models import User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"
    icon = "fa-solid fa-user"

    column_list = [
        User.email,
        User.first_name,
        User.last_name,
        User.status,
        User.id,
        User.external_id,
        User.created_at,
    ]
    column_searchable_list = [
        User.email,
        User.first_name,
        User.last_name,
        User.external_id,
    ]
    column_sortable_list = [User.email, User.status, User.created_at]
    # Push tokens are device credentials
    column_details_exclude_list = [User.push_token]
    form_excluded_columns = [User.push_token, User.external_id]


class AreaAdmin(ModelView, model=AreaOfInterest):
    name = "Area of interest"
    name_plural = "Areas of interest"
    icon = "fa-solid fa-circle-dot"

    column_list = [
        AreaOfInterest.name,
        AreaOfInterest.visibility,
        AreaOfInterest.radius,
        AreaOfInterest.latitude,
        AreaOfInterest.longitude,
        AreaOfInterest.creator_id,
        AreaOfInterest.created_at,
    ]
    column_searchable_list = [AreaOfInterest.name]
    column_sortable_list = [AreaOfInterest.name, AreaOfInterest.created_at]


class EventAdmin(ModelView, model=Event):
    name = "Event"
    name_plural = "Events"
    icon = "fa-solid fa-triangle-exclamation"

    column_list = [
        Event.type,
        Event.status,
        Event.is_public,
        Event.is_urgent,
        Event.description,
        Event.author_id,
        Event.created_at,
    ]
    column_searchable_list = [Event.description]
    column_sortable_list = [Event.type, Event.status, Event.created_at]
    column_default_sort = [(Event.created_at, True)]


class GroupAdmin(ModelView, model=Group):
    name = "Group"
    name_plural = "Groups"
    icon = "fa-solid fa-users"

    column_list = [Group.name, Group.creator_id, Group.created_at]
    column_searchable_list = [Group.name]
    column_sortable_list = [Group.name, Group.created_at]


class DeviceAdmin(ModelView, model=Device):
    name = "Device"
    name_plural = "Devices"
    icon = "fa-solid fa-location-crosshairs"

    column_list = [
        Device.name,
        Device.type,
        Device.imei,
        Device.qr_code,
        Device.qr_enabled,
        Device.user_id,
    ]
    column_searchable_list = [Device.name, Device.imei, Device.qr_code]
    column_sortable_list = [Device.name, Device.type, Device.created_at]


class FoundObjectChatAdmin(ModelView, model=FoundObjectChat):
    name = "Found-object chat"
    name_plural = "Found-object chats"
    icon = "fa-solid fa-comments"
    can_create = False

    column_list = [
        FoundObjectChat.id,
        FoundObjectChat.device_id,
        FoundObjectChat.owner_id,
        FoundObjectChat.finder_id,
        FoundObjectChat.finder_name,
        FoundObjectChat.status,
        FoundObjectChat.updated_at,
    ]
    column_sortable_list = [FoundObjectChat.status, FoundObjectChat.updated_at]
    # The session token is the finder's only credential
    column_details_exclude_list = [FoundObjectChat.finder_session_id]
    form_excluded_columns = [FoundObjectChat.finder_session_id]
