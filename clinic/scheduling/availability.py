from datetime import date

from clinic.scheduling.ports import AppointmentStore, DoctorLookup
from clinic.scheduling.slots import appointment_hour, day_bounds, slot_hour


class AvailabilityCalculator:
    """Derives a doctor's free slots for one calendar date.

    Nothing is cached: every call reads the template and the day's
    appointments again.
    """

    def __init__(self, doctors: DoctorLookup, appointments: AppointmentStore):
        self.doctors = doctors
        self.appointments = appointments

    def availability(self, doctor_id: int, day: date, exclude_appointment_id: int | None = None) -> list[str]:
        doctor = self.doctors.find_by_id(doctor_id)
        if doctor is None:
            return []

        free_slots = list(doctor.available_times or [])
        start, end = day_bounds(day)
        booked = self.appointments.find_by_doctor_and_date_range(doctor_id, start, end)

        for appointment in booked:
            if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
                continue
            busy_hour = appointment_hour(appointment.appointment_time)
            taken = next((slot for slot in free_slots if slot_hour(slot) == busy_hour), None)
            if taken is not None:
                free_slots.remove(taken)

        return free_slots

    def free_hours(self, doctor_id: int, day: date) -> list[str]:
        return [slot_hour(slot) for slot in self.availability(doctor_id, day)]
