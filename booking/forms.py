from django import forms
from django.contrib.auth.models import User

from .models import ContactMessage, Stadium, UserProfile


class StadiumForm(forms.ModelForm):
    class Meta:
        model = Stadium
        fields = [
            'name', 'location', 'capacity', 'price_per_hour', 'rating',
            'amenities', 'description', 'image', 'image_url', 'is_active',
        ]
        widgets = {
            'amenities': forms.TextInput(attrs={'placeholder': 'Parking, Floodlights, Changing rooms'}),
            'description': forms.Textarea(attrs={'rows': 3}),
        }
        labels = {'is_active': 'Stadium is active'}

    def clean_amenities(self):
        raw = self.cleaned_data.get('amenities', '')
        return ", ".join(item.strip() for item in raw.split(",") if item.strip())


class BookingForm(forms.Form):
    date = forms.DateField(widget=forms.DateInput(attrs={'type': 'date'}))
    start_time = forms.TimeField(widget=forms.TimeInput(attrs={'type': 'time'}))
    end_time = forms.TimeField(widget=forms.TimeInput(attrs={'type': 'time'}))
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 3}))
    transaction_name = forms.CharField(required=False, max_length=150, label="Mobile money name")
    transaction_number = forms.CharField(required=False, max_length=100, label="Transaction number")

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get('start_time')
        end = cleaned.get('end_time')
        if start and end and end <= start:
            raise forms.ValidationError("End time must be after start time.")
        return cleaned


class ProfileEditForm(forms.ModelForm):
    phone = forms.CharField(required=False, max_length=30, label="Phone Number")
    address = forms.CharField(required=False, max_length=255)

    class Meta:
        model = User
        fields = ['first_name', 'email']  # username unchanged here
        labels = {'first_name': 'Full name'}

    def __init__(self, *args, **kwargs):
        profile = kwargs.pop('profile', None)
        super().__init__(*args, **kwargs)
        self.fields['email'].required = True
        if profile:
            self.fields['phone'].initial = profile.phone
            self.fields['address'].initial = profile.address

    def clean_email(self):
        email = self.cleaned_data['email']
        if User.objects.filter(email__iexact=email).exclude(pk=self.instance.pk).exists():
            raise forms.ValidationError("Email already registered.")
        return email

    def update_profile(self, profile):
        profile.phone = self.cleaned_data.get('phone', '')
        profile.address = self.cleaned_data.get('address', '')

    def save(self, commit=True):
        user = super().save(commit)
        profile, _ = UserProfile.objects.get_or_create(user=user)
        self.update_profile(profile)
        if commit:
            profile.save()
        return user


class AdminUserForm(ProfileEditForm):
    role = forms.ChoiceField(choices=UserProfile.ROLE_CHOICES)
    status = forms.ChoiceField(choices=UserProfile.STATUS_CHOICES)

    def __init__(self, *args, **kwargs):
        profile = kwargs.get('profile')
        super().__init__(*args, **kwargs)
        if profile:
            self.fields['role'].initial = profile.role
            self.fields['status'].initial = profile.status

    def update_profile(self, profile):
        super().update_profile(profile)
        profile.role = self.cleaned_data['role']
        profile.status = self.cleaned_data['status']


class ContactForm(forms.ModelForm):
    class Meta:
        model = ContactMessage
        fields = ['name', 'email', 'phone', 'subject', 'inquiry_type', 'message']
        widgets = {'message': forms.Textarea(attrs={'rows': 5})}
