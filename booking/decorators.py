from functools import wraps

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect

from .models import get_profile


def admin_required(view_func):
    """login_required plus an admin role check; non-admins go back to their dashboard."""

    @login_required(login_url="login")
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not get_profile(request.user).is_admin:
            messages.error(request, "Admin access required.")
            return redirect("user-dashboard")
        return view_func(request, *args, **kwargs)

    return wrapper
